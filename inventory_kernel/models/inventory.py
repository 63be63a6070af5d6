"""
Module: inventory_kernel.models.inventory
Responsibility: ORM persistence for current stock per product -- the
    Inventory Store.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - quantity >= 0 (ck_inventory_quantity_non_negative).
    - min_stock_level >= 0 (ck_inventory_min_level_non_negative).
    - One row per product (product_id is the primary key).
    - Rows are never deleted (db/immutability.py, db/sql/*).

Failure modes:
    - IntegrityError if a write would violate a CHECK constraint.  The
      services never issue such writes; the constraint is the backstop.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TimestampedBase, UTCDateTime

DEFAULT_MIN_STOCK_LEVEL = 5


class InventoryItem(TimestampedBase):
    """
    Current stock level for one catalog product.

    Contract:
        Mutated only by StockService (stock in/out, threshold changes).
        Quantity changes are always paired with a StockTransaction row in
        the same database transaction.
    """

    __tablename__ = "inventory"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint(
            "min_stock_level >= 0", name="ck_inventory_min_level_non_negative"
        ),
        Index("idx_inventory_quantity", "quantity"),
    )

    # Catalog product identifier (owned by the catalog, not generated here)
    product_id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    quantity: Mapped[int] = mapped_column(
        nullable=False,
        default=0,
    )

    min_stock_level: Mapped[int] = mapped_column(
        nullable=False,
        default=DEFAULT_MIN_STOCK_LEVEL,
    )

    last_updated: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<InventoryItem product={self.product_id} qty={self.quantity} "
            f"min={self.min_stock_level}>"
        )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0
