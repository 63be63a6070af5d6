"""Tests for ConsistencyAuditor / InventoryLedger.verify_consistency."""

from sqlalchemy import update

from inventory_kernel.domain.dtos import Discrepancy
from inventory_kernel.models.inventory import InventoryItem


def test_consistent_ledger(ledger, stocked):
    stocked({1: 10, 2: 0})
    ledger.stock_out(1, 4).unwrap()
    assert ledger.verify_consistency() == []


def test_detects_quantity_changed_outside_ledger(ledger, stocked, database, captured_logs):
    stocked({1: 10, 2: 3})
    with database.session_scope() as session:
        session.execute(
            update(InventoryItem)
            .where(InventoryItem.product_id == 1)
            .values(quantity=12)
            .execution_options(synchronize_session=False)
        )

    discrepancies = ledger.verify_consistency()

    assert discrepancies == [Discrepancy(product_id=1, stored_quantity=12, replayed_quantity=10)]
    assert discrepancies[0].difference == 2
    violation = next(r for r in captured_logs() if r["message"] == "consistency_violation")
    assert violation["stored_quantity"] == 12
    assert violation["replayed_quantity"] == 10
