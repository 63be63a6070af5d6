"""
Module: inventory_kernel.db.base
Responsibility: Declarative base for all inventory ORM models.  Provides the
    type annotation map for consistent column types and the TimestampedBase
    mixin for row creation time.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel; MUST NOT import from models/, services/, selectors/ or domain/.

Invariants enforced:
    - int maps to BigInteger, Decimal to Numeric(18, 4), datetime to a
      timezone-aware DateTime.  Models never pick ad-hoc column types.
    - Each model declares its own primary key: inventory rows are keyed by
      the catalog's product id, transaction rows by an auto-increment id.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp normalized to UTC.

    Contract:
        Aware datetimes are converted to UTC before binding; values read
        back are always aware UTC datetimes.  Backends that drop the offset
        (SQLite) return naive values, which are tagged as UTC on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - Decimal maps to Numeric(18, 4).
        - datetime maps to UTCDateTime (aware, UTC on load).
        - int maps to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(18, 4),
        datetime: UTCDateTime(),
        int: BigInteger,
    }


class TimestampedBase(Base):
    """
    Abstract base recording when a row was first written.

    created_at is filled by the database on INSERT and never changes.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        nullable=False,
    )
