"""
Module: inventory_kernel.selectors.inventory_selector
Responsibility: Read-only access to the Inventory Store (current stock state).
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Low-stock means quantity <= min_stock_level, evaluated in SQL.
    - Low-stock listings are ordered by quantity ascending (product_id breaks
      ties so the order is deterministic).

Failure modes:
    - Returns None / empty collections when rows are absent; never raises on
      absence of data.
"""

from collections.abc import Collection

from sqlalchemy import select

from inventory_kernel.domain.dtos import InventoryRecord
from inventory_kernel.models.inventory import InventoryItem
from inventory_kernel.selectors.base import BaseSelector


class InventorySelector(BaseSelector[InventoryItem]):
    """Selector for current stock levels."""

    @staticmethod
    def to_record(item: InventoryItem) -> InventoryRecord:
        return InventoryRecord(
            product_id=item.product_id,
            quantity=item.quantity,
            min_stock_level=item.min_stock_level,
            last_updated=item.last_updated,
        )

    def get(self, product_id: int) -> InventoryRecord | None:
        item = self.session.execute(
            select(InventoryItem)
            .where(InventoryItem.product_id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self.to_record(item) if item is not None else None

    def get_many(self, product_ids: Collection[int]) -> dict[int, InventoryRecord]:
        """Records for the given products, keyed by product id."""
        if not product_ids:
            return {}
        items = self.session.execute(
            select(InventoryItem)
            .where(InventoryItem.product_id.in_(list(product_ids)))
            .execution_options(populate_existing=True)
        ).scalars()
        return {item.product_id: self.to_record(item) for item in items}

    def list_low_stock(
        self, product_ids: Collection[int] | None = None
    ) -> list[InventoryRecord]:
        """
        Records at or below their threshold, lowest quantity first.

        Args:
            product_ids: Restrict to these products (e.g. the catalog's active
                set).  None means all records.
        """
        query = select(InventoryItem).where(
            InventoryItem.quantity <= InventoryItem.min_stock_level
        )
        if product_ids is not None:
            if not product_ids:
                return []
            query = query.where(InventoryItem.product_id.in_(list(product_ids)))
        query = query.order_by(
            InventoryItem.quantity.asc(), InventoryItem.product_id.asc()
        ).execution_options(populate_existing=True)
        return [self.to_record(item) for item in self.session.execute(query).scalars()]

    def quantity_of(self, product_id: int) -> int | None:
        """Latest committed quantity for a product, or None without a record."""
        return self.session.execute(
            select(InventoryItem.quantity).where(InventoryItem.product_id == product_id)
        ).scalar_one_or_none()
