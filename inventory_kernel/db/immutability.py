"""
ORM-Level Immutability Enforcement (layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

The transaction log is the audit trail for every stock change, and the
inventory row for a product outlives the product's catalog lifecycle.  This
module stops modifications made through SQLAlchemy before any SQL is sent:

  Layer 1: THIS FILE (ORM mapper event listeners)
  Layer 2: db/sql/<dialect>/*.sql (database triggers, see db/triggers.py)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity            | Rule                               | Why
------------------|------------------------------------|------------------------------
StockTransaction  | never UPDATE, never DELETE         | history is append-only
InventoryItem     | never DELETE                       | soft-deleted products keep
                  |                                    | their stock and history

InventoryItem updates are allowed: quantities move through StockService's
conditional UPDATE statements, thresholds through ORM attribute changes.

===============================================================================
USAGE
===============================================================================

Registered by Database() on construction.  Tests that need to prove the
trigger layer on its own may call unregister_immutability_listeners() and
must re-register afterwards.
"""

from sqlalchemy import event

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_stock_transaction_update(mapper, connection, target):
    logger.error(
        "immutability_violation",
        extra={"entity_type": "StockTransaction", "entity_id": str(target.id)},
    )
    raise ImmutabilityViolationError(
        entity_type="StockTransaction",
        entity_id=str(target.id),
        reason="Transaction records are append-only and cannot be modified",
    )


def _check_stock_transaction_delete(mapper, connection, target):
    logger.error(
        "immutability_violation",
        extra={"entity_type": "StockTransaction", "entity_id": str(target.id)},
    )
    raise ImmutabilityViolationError(
        entity_type="StockTransaction",
        entity_id=str(target.id),
        reason="Transaction records are append-only and cannot be deleted",
    )


def _check_inventory_delete(mapper, connection, target):
    logger.error(
        "immutability_violation",
        extra={"entity_type": "InventoryItem", "entity_id": str(target.product_id)},
    )
    raise ImmutabilityViolationError(
        entity_type="InventoryItem",
        entity_id=str(target.product_id),
        reason="Inventory records are retained for the life of the ledger",
    )


def _listeners():
    from inventory_kernel.models.inventory import InventoryItem
    from inventory_kernel.models.stock_transaction import StockTransaction

    return [
        (StockTransaction, "before_update", _check_stock_transaction_update),
        (StockTransaction, "before_delete", _check_stock_transaction_delete),
        (InventoryItem, "before_delete", _check_inventory_delete),
    ]


def register_immutability_listeners() -> None:
    """Register all ORM immutability listeners (idempotent)."""
    for target, name, fn in _listeners():
        if not event.contains(target, name, fn):
            event.listen(target, name, fn)


def unregister_immutability_listeners() -> None:
    """Remove all ORM immutability listeners. FOR TESTING ONLY."""
    for target, name, fn in _listeners():
        if event.contains(target, name, fn):
            event.remove(target, name, fn)


def listeners_registered() -> bool:
    return all(event.contains(t, n, f) for t, n, f in _listeners())
