"""
Module: inventory_kernel.models.stock_transaction
Responsibility: ORM persistence for the append-only Transaction Log -- one row
    per stock movement.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - quantity > 0 (ck_stock_transaction_quantity_positive).
    - direction in ('IN', 'OUT') (ck_stock_transaction_direction).
    - Rows are immutable once written: no UPDATE, no DELETE
      (db/immutability.py, db/sql/*).
    - id is assigned by the database at INSERT and increases monotonically.

Audit relevance:
    Replaying these rows per product (+IN, -OUT) reproduces the stored
    inventory quantity.  ConsistencyAuditor checks exactly that.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, UTCDateTime
from inventory_kernel.db.types import NOTES_MAX_LENGTH, IdentityKey


class MovementDirection(str, Enum):
    """Direction of a stock movement."""

    IN = "IN"
    OUT = "OUT"


class StockTransaction(Base):
    """
    One stock movement.

    Contract:
        Written only by StockService, inside the same database transaction
        as the matching InventoryItem quantity change.  Never updated or
        deleted afterwards.
    """

    __tablename__ = "stock_transactions"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_transaction_quantity_positive"),
        CheckConstraint(
            "direction IN ('IN', 'OUT')", name="ck_stock_transaction_direction"
        ),
        Index("idx_stock_transaction_product_time", "product_id", "occurred_at"),
        Index("idx_stock_transaction_time", "occurred_at"),
    )

    id: Mapped[int] = mapped_column(
        IdentityKey,
        primary_key=True,
        autoincrement=True,
    )

    product_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("inventory.product_id"),
        nullable=False,
    )

    direction: Mapped[MovementDirection] = mapped_column(
        String(3),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(nullable=False)

    notes: Mapped[str] = mapped_column(
        String(NOTES_MAX_LENGTH),
        nullable=False,
        default="",
    )

    occurred_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<StockTransaction {self.id} {self.direction} "
            f"product={self.product_id} qty={self.quantity}>"
        )

    @property
    def signed_quantity(self) -> int:
        """+quantity for IN, -quantity for OUT."""
        if self.direction == MovementDirection.OUT:
            return -self.quantity
        return self.quantity
