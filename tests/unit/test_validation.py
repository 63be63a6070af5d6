"""Tests for ledger input validation."""

import pytest

from inventory_kernel.exceptions import InvalidInputError
from inventory_kernel.services.validation import (
    normalize_notes,
    require_positive_quantity,
    require_product_id,
    require_threshold,
)


@pytest.mark.parametrize("value", [0, -1, True, 1.5, "3", None])
def test_quantity_rejected(value):
    with pytest.raises(InvalidInputError) as exc_info:
        require_positive_quantity(value)
    assert exc_info.value.field == "quantity"


def test_quantity_accepted():
    assert require_positive_quantity(1) == 1


@pytest.mark.parametrize("value", [0, -7, False, "1"])
def test_product_id_rejected(value):
    with pytest.raises(InvalidInputError) as exc_info:
        require_product_id(value)
    assert exc_info.value.field == "product_id"


@pytest.mark.parametrize("value", [-1, 2.0, True])
def test_threshold_rejected(value):
    with pytest.raises(InvalidInputError) as exc_info:
        require_threshold(value)
    assert exc_info.value.field == "min_stock_level"


def test_zero_threshold_accepted():
    assert require_threshold(0) == 0


class TestNotes:

    def test_none_becomes_empty(self):
        assert normalize_notes(None) == ""

    def test_max_length_accepted(self):
        assert normalize_notes("x" * 500) == "x" * 500

    def test_too_long_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            normalize_notes("x" * 501)
        assert exc_info.value.field == "notes"

    def test_non_text_rejected(self):
        with pytest.raises(InvalidInputError):
            normalize_notes(12)

    def test_nul_character_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            normalize_notes("a\x00b")
        assert exc_info.value.field == "notes"
