"""ORM models for the inventory kernel."""

from inventory_kernel.models.inventory import DEFAULT_MIN_STOCK_LEVEL, InventoryItem
from inventory_kernel.models.stock_transaction import MovementDirection, StockTransaction

__all__ = [
    "DEFAULT_MIN_STOCK_LEVEL",
    "InventoryItem",
    "MovementDirection",
    "StockTransaction",
]
