"""
Pure domain layer.

DTOs, tagged results and the clock abstraction.  Nothing here touches the
ORM or the database.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    Direction,
    Discrepancy,
    InventoryRecord,
    InventorySummary,
    TransactionRecord,
)
from inventory_kernel.domain.results import LedgerResult, LedgerStatus

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "Direction",
    "Discrepancy",
    "InventoryRecord",
    "InventorySummary",
    "TransactionRecord",
    "LedgerResult",
    "LedgerStatus",
]
