"""Kernel services - ledger engine, write services, reporting, auditing."""

from inventory_kernel.services.consistency_auditor import ConsistencyAuditor
from inventory_kernel.services.inventory_ledger import (
    DEFAULT_RECENT_LIMIT,
    InventoryLedger,
)
from inventory_kernel.services.report_service import ReportService
from inventory_kernel.services.retry import run_with_storage_retry
from inventory_kernel.services.stock_service import StockService

__all__ = [
    "ConsistencyAuditor",
    "DEFAULT_RECENT_LIMIT",
    "InventoryLedger",
    "ReportService",
    "StockService",
    "run_with_storage_retry",
]
