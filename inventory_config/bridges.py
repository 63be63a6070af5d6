"""
Config -> Kernel Bridges.

Turn an InventoryConfig into kernel objects.  These live in inventory_config
(the producer) because the kernel must never import inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import (
        build_database,
        build_ledger,
        configure_logging_from,
    )

    config = get_active_config(Path("inventory.yaml"))
    configure_logging_from(config)
    database = build_database(config)
    ledger = build_ledger(config, catalog, database=database)
"""

from __future__ import annotations

from inventory_config.schema import InventoryConfig
from inventory_kernel.catalog import CatalogLookup
from inventory_kernel.db.engine import Database
from inventory_kernel.domain.clock import Clock
from inventory_kernel.logging_config import configure_logging
from inventory_kernel.services.inventory_ledger import InventoryLedger


def build_database(config: InventoryConfig) -> Database:
    """Store handle for the configured database URL and pool settings."""
    db = config.database
    return Database.from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=db.pool_pre_ping,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
        busy_timeout=db.busy_timeout,
    )


def build_ledger(
    config: InventoryConfig,
    catalog: CatalogLookup,
    clock: Clock | None = None,
    database: Database | None = None,
) -> InventoryLedger:
    """InventoryLedger wired with the configured ledger defaults."""
    ledger = config.ledger
    return InventoryLedger(
        database if database is not None else build_database(config),
        catalog,
        clock=clock,
        default_min_stock_level=ledger.default_min_stock_level,
        recent_limit=ledger.recent_limit,
        max_storage_retries=ledger.max_storage_retries,
        retry_backoff_seconds=ledger.retry_backoff_seconds,
    )


def configure_logging_from(config: InventoryConfig) -> None:
    configure_logging(level=config.logging.level_number)
