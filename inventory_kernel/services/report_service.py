"""
ReportService -- low-stock listing, inventory listing and valuation.

Responsibility:
    Read-only aggregation over the Inventory Store for the catalog's active
    products, enriched with catalog display data and priced with catalog
    unit prices.

Architecture position:
    Kernel > Services.  Reads through InventorySelector and CatalogLookup;
    never writes.

Invariants enforced:
    - Only products the catalog reports active are listed or counted.
    - A product with no inventory record counts as quantity 0 in the
      summary; it is never an error.
    - lowStockCount equals the length of list_low_stock().
    - Valuation is rounded once, on the total, with round_money().
"""

from dataclasses import replace
from decimal import Decimal

from sqlalchemy.orm import Session

from inventory_kernel.catalog import CatalogLookup
from inventory_kernel.db.types import round_money
from inventory_kernel.domain.dtos import InventoryRecord, InventorySummary
from inventory_kernel.exceptions import ProductNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.selectors.inventory_selector import InventorySelector

logger = get_logger("services.report")


def with_display(record: InventoryRecord, catalog: CatalogLookup) -> InventoryRecord:
    """Copy of ``record`` carrying the catalog name and sku, if known."""
    try:
        info = catalog.display_info(record.product_id)
    except ProductNotFoundError:
        return record
    return replace(record, product_name=info.name, sku=info.sku)


class ReportService:
    """Reporting over current stock for active catalog products."""

    def __init__(self, session: Session, catalog: CatalogLookup):
        self._selector = InventorySelector(session)
        self._catalog = catalog

    def list_low_stock(self) -> list[InventoryRecord]:
        """Active products at or below threshold, lowest quantity first."""
        records = self._selector.list_low_stock(self._catalog.active_product_ids())
        return [with_display(record, self._catalog) for record in records]

    def list_inventory(self) -> list[InventoryRecord]:
        """Inventory records of active products, ordered by product name."""
        records = self._selector.get_many(self._catalog.active_product_ids())
        enriched = [with_display(record, self._catalog) for record in records.values()]
        return sorted(
            enriched,
            key=lambda r: ((r.product_name or "").casefold(), r.product_id),
        )

    def summarize(self) -> InventorySummary:
        active_ids = self._catalog.active_product_ids()
        records = self._selector.get_many(active_ids)

        total_units = 0
        total_value = Decimal("0")
        for product_id in active_ids:
            record = records.get(product_id)
            quantity = record.quantity if record is not None else 0
            total_units += quantity
            if quantity:
                total_value += quantity * self._catalog.unit_price(product_id)

        low_stock_count = len(self._selector.list_low_stock(active_ids))

        summary = InventorySummary(
            total_active_products=len(active_ids),
            total_units=total_units,
            total_value=round_money(total_value),
            low_stock_count=low_stock_count,
        )
        logger.debug(
            "inventory_summarized",
            extra={
                "total_active_products": summary.total_active_products,
                "total_units": summary.total_units,
                "total_value": str(summary.total_value),
            },
        )
        return summary
