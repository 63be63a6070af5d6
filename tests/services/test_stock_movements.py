"""Tests for StockIn / StockOut through InventoryLedger."""

from decimal import Decimal

import pytest

from inventory_kernel.domain.dtos import Direction
from inventory_kernel.domain.results import LedgerStatus
from inventory_kernel.exceptions import InsufficientStockError


def _quantity(ledger, product_id: int) -> int:
    return ledger.get_inventory(product_id).quantity


class TestStockIn:

    def test_increments_and_records_movement(self, ledger, clock):
        ledger.open_inventory(1).unwrap()
        clock.advance(60)

        result = ledger.stock_in(1, 10, notes="PO-17")

        assert result.status is LedgerStatus.APPLIED
        txn = result.record
        assert txn.product_id == 1
        assert txn.direction is Direction.IN
        assert txn.quantity == 10
        assert txn.notes == "PO-17"
        assert txn.timestamp == clock.now()
        assert txn.product_name == "Widget"

        record = ledger.get_inventory(1)
        assert record.quantity == 10
        assert record.last_updated == clock.now()

    def test_opens_missing_record(self, ledger):
        assert ledger.get_inventory(2) is None

        ledger.stock_in(2, 3).unwrap()

        record = ledger.get_inventory(2)
        assert record.quantity == 3
        assert record.min_stock_level == 5

    def test_notes_default_to_empty(self, ledger):
        assert ledger.stock_in(1, 1).record.notes == ""

    def test_transaction_ids_increase(self, ledger):
        first = ledger.stock_in(1, 1).unwrap()
        second = ledger.stock_in(2, 1).unwrap()
        assert second.id > first.id

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_rejected(self, ledger, quantity):
        result = ledger.stock_in(1, quantity)

        assert result.status is LedgerStatus.INVALID_INPUT
        assert result.error.field == "quantity"
        assert ledger.get_inventory(1) is None
        assert ledger.transactions_for_product(1) == []

    def test_unknown_product_rejected(self, ledger):
        result = ledger.stock_in(99, 5)

        assert result.status is LedgerStatus.NOT_FOUND
        assert result.error.product_id == 99
        assert ledger.get_inventory(99) is None

    def test_invalid_product_id_rejected(self, ledger):
        assert ledger.stock_in(0, 5).status is LedgerStatus.INVALID_INPUT

    def test_validation_precedes_catalog_check(self, ledger):
        # unknown product and bad quantity: the input error wins
        assert ledger.stock_in(99, 0).status is LedgerStatus.INVALID_INPUT

    def test_overlong_notes_rejected(self, ledger):
        result = ledger.stock_in(1, 1, notes="n" * 501)
        assert result.status is LedgerStatus.INVALID_INPUT
        assert result.error.field == "notes"

    def test_nul_in_notes_rejected_without_effect(self, ledger):
        result = ledger.stock_in(1, 1, notes="a\x00b")
        assert result.status is LedgerStatus.INVALID_INPUT
        assert result.error.field == "notes"
        assert ledger.get_inventory(1) is None


class TestStockOut:

    def test_decrements_and_records_movement(self, ledger, stocked):
        stocked({1: 10})

        txn = ledger.stock_out(1, 4, notes="order 1001").unwrap()

        assert txn.direction is Direction.OUT
        assert txn.quantity == 4
        assert _quantity(ledger, 1) == 6

    def test_exact_quantity_empties_stock(self, ledger, stocked):
        stocked({1: 5})
        ledger.stock_out(1, 5).unwrap()

        record = ledger.get_inventory(1)
        assert record.quantity == 0
        assert record.is_out_of_stock

    def test_insufficient_stock_leaves_quantity(self, ledger, stocked):
        stocked({1: 5})

        result = ledger.stock_out(1, 6)

        assert result.status is LedgerStatus.INSUFFICIENT_STOCK
        assert result.error.available == 5
        assert result.error.requested == 6
        assert _quantity(ledger, 1) == 5
        assert len(ledger.transactions_for_product(1)) == 1

    def test_unwrap_raises_insufficient_stock(self, ledger, stocked):
        stocked({1: 1})
        with pytest.raises(InsufficientStockError):
            ledger.stock_out(1, 2).unwrap()

    def test_without_record_reports_zero_available(self, ledger):
        result = ledger.stock_out(2, 1)

        assert result.status is LedgerStatus.INSUFFICIENT_STOCK
        assert result.error.available == 0
        assert ledger.get_inventory(2) is None

    def test_unknown_product(self, ledger):
        assert ledger.stock_out(99, 1).status is LedgerStatus.NOT_FOUND

    def test_zero_quantity(self, ledger, stocked):
        stocked({1: 3})
        assert ledger.stock_out(1, 0).status is LedgerStatus.INVALID_INPUT
        assert _quantity(ledger, 1) == 3


class TestSoftDeletedProducts:

    def test_movements_rejected_history_kept(self, ledger, catalog, stocked):
        stocked({1: 8})
        catalog.deactivate(1)

        assert ledger.stock_in(1, 1).status is LedgerStatus.NOT_FOUND
        assert ledger.stock_out(1, 1).status is LedgerStatus.NOT_FOUND
        assert _quantity(ledger, 1) == 8
        assert len(ledger.transactions_for_product(1)) == 1
        assert ledger.get_inventory(1).product_name == "Widget"

    def test_reactivation_keeps_quantity(self, ledger, catalog, stocked):
        stocked({1: 8})
        catalog.deactivate(1)
        catalog.reactivate(1)

        ledger.stock_out(1, 3).unwrap()
        assert _quantity(ledger, 1) == 5


class TestReplay:

    def test_sequence_replays_to_store(self, ledger):
        ledger.stock_in(1, 10).unwrap()
        ledger.stock_out(1, 3).unwrap()
        assert ledger.stock_out(1, 9).status is LedgerStatus.INSUFFICIENT_STOCK
        ledger.stock_in(1, 2).unwrap()
        ledger.stock_out(1, 9).unwrap()

        history = ledger.transactions_for_product(1)
        assert sum(t.signed_quantity for t in history) == _quantity(ledger, 1) == 0
        assert ledger.verify_consistency() == []


def test_unit_price_not_needed_for_movements(ledger, catalog):
    catalog.add_product(10, "Freebie", "FREE-1", Decimal("0"))
    assert ledger.stock_in(10, 1).is_success
