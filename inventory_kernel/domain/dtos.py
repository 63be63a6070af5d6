"""
Data Transfer Objects for the inventory kernel.

Frozen dataclasses returned to callers of the ledger and its selectors.
They have no ORM dependency: selectors convert model rows into these at the
boundary, so callers never hold a live SQLAlchemy object.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class Direction(str, Enum):
    """Direction of a stock movement."""

    IN = "IN"
    OUT = "OUT"


@dataclass(frozen=True)
class InventoryRecord:
    """
    Current stock state for one product.

    product_name and sku are filled from the catalog when the record is
    returned by a listing; they are None when the catalog has no display
    data for the product.
    """

    product_id: int
    quantity: int
    min_stock_level: int
    last_updated: datetime
    product_name: str | None = None
    sku: str | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock_level

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0

    @property
    def status(self) -> str:
        if self.is_out_of_stock:
            return "OUT_OF_STOCK"
        if self.is_low_stock:
            return "LOW_STOCK"
        return "OK"


@dataclass(frozen=True)
class TransactionRecord:
    """One immutable stock movement from the transaction log."""

    id: int
    product_id: int
    direction: Direction
    quantity: int
    notes: str
    timestamp: datetime
    product_name: str | None = None

    @property
    def signed_quantity(self) -> int:
        """+quantity for IN, -quantity for OUT."""
        return self.quantity if self.direction == Direction.IN else -self.quantity


@dataclass(frozen=True)
class InventorySummary:
    """Aggregate valuation over active catalog products."""

    total_active_products: int
    total_units: int
    total_value: Decimal
    low_stock_count: int = 0


@dataclass(frozen=True)
class Discrepancy:
    """A product whose stored quantity disagrees with its replayed history."""

    product_id: int
    stored_quantity: int
    replayed_quantity: int

    @property
    def difference(self) -> int:
        return self.stored_quantity - self.replayed_quantity
