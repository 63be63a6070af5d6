"""Database layer - store handle, base classes, types, immutability."""

from inventory_kernel.db.base import Base, TimestampedBase, UTCDateTime
from inventory_kernel.db.engine import Database
from inventory_kernel.db.types import NOTES_MAX_LENGTH, round_money

__all__ = [
    "Database",
    "Base",
    "TimestampedBase",
    "UTCDateTime",
    "NOTES_MAX_LENGTH",
    "round_money",
]
