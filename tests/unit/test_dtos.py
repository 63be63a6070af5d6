"""Tests for domain DTOs."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from inventory_kernel.domain.dtos import (
    Direction,
    Discrepancy,
    InventoryRecord,
    TransactionRecord,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(quantity: int, min_level: int = 5) -> InventoryRecord:
    return InventoryRecord(product_id=1, quantity=quantity, min_stock_level=min_level, last_updated=NOW)


class TestInventoryRecord:

    @pytest.mark.parametrize(
        "quantity, min_level, low, out, status",
        [
            (0, 5, True, True, "OUT_OF_STOCK"),
            (2, 5, True, False, "LOW_STOCK"),
            (5, 5, True, False, "LOW_STOCK"),
            (6, 5, False, False, "OK"),
            (0, 0, True, True, "OUT_OF_STOCK"),
        ],
    )
    def test_derived_flags(self, quantity, min_level, low, out, status):
        record = _record(quantity, min_level)
        assert record.is_low_stock is low
        assert record.is_out_of_stock is out
        assert record.status == status

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            _record(1).quantity = 2


class TestTransactionRecord:

    def test_signed_quantity(self):
        common = dict(id=1, product_id=1, quantity=4, notes="", timestamp=NOW)
        assert TransactionRecord(direction=Direction.IN, **common).signed_quantity == 4
        assert TransactionRecord(direction=Direction.OUT, **common).signed_quantity == -4


def test_discrepancy_difference():
    assert Discrepancy(product_id=1, stored_quantity=10, replayed_quantity=7).difference == 3
