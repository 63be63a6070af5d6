"""
Ledger Invariants Contract.

These invariants are structural law for the stock ledger.  No setting may
switch them off.  This module only declares them; enforcement lives in
StockService (conditional updates), the ORM listeners and SQL triggers in
``inventory_kernel.db``, the table CHECK constraints, and ConsistencyAuditor.
"""

from enum import Enum, unique


@unique
class LedgerInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    NON_NEGATIVE_QUANTITY = "non_negative_quantity"
    """On-hand quantity is never below zero.  Enforced by the conditional
    StockOut update and the ``ck_inventory_quantity_non_negative`` CHECK."""

    PAIRED_MOVEMENT = "paired_movement"
    """Every quantity change commits together with exactly one transaction
    record.  Enforced by InventoryLedger running both writes in one
    session_scope()."""

    NON_NEGATIVE_THRESHOLD = "non_negative_threshold"
    """Minimum stock level is never below zero.  Enforced by input
    validation and the ``ck_inventory_min_level_non_negative`` CHECK."""

    APPEND_ONLY_HISTORY = "append_only_history"
    """Transaction records are never updated or deleted.  Enforced by ORM
    listeners and database triggers."""

    REPLAY_EQUALS_STORE = "replay_equals_store"
    """Sum of IN minus OUT quantities per product equals its stored quantity.
    Verified by ConsistencyAuditor."""


ALL_LEDGER_INVARIANTS: frozenset[LedgerInvariant] = frozenset(LedgerInvariant)

# The kernel package may not import from these packages.
# Enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = ("inventory_config",)
