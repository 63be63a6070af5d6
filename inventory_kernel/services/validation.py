"""
Input validation for ledger operations.

Pure checks run before any storage access, so an invalid call never opens a
unit of work.  Each check raises InvalidInputError naming the offending field
and value.
"""

from inventory_kernel.db.types import NOTES_MAX_LENGTH
from inventory_kernel.exceptions import InvalidInputError


def _is_int(value: object) -> bool:
    # bool is an int subclass; True must not pass as quantity 1
    return isinstance(value, int) and not isinstance(value, bool)


def require_product_id(product_id: object) -> int:
    if not _is_int(product_id) or product_id <= 0:
        raise InvalidInputError("product_id", product_id, "must be a positive integer")
    return product_id


def require_positive_quantity(quantity: object) -> int:
    if not _is_int(quantity) or quantity <= 0:
        raise InvalidInputError("quantity", quantity, "must be an integer greater than zero")
    return quantity


def require_threshold(min_level: object) -> int:
    if not _is_int(min_level) or min_level < 0:
        raise InvalidInputError(
            "min_stock_level", min_level, "must be an integer of zero or more"
        )
    return min_level


def normalize_notes(notes: str | None) -> str:
    """None becomes ""; NUL characters and text longer than NOTES_MAX_LENGTH are rejected."""
    if notes is None:
        return ""
    if not isinstance(notes, str):
        raise InvalidInputError("notes", notes, "must be text")
    # PostgreSQL text columns cannot hold NUL
    if "\x00" in notes:
        raise InvalidInputError("notes", repr(notes[:40]), "must not contain NUL characters")
    if len(notes) > NOTES_MAX_LENGTH:
        raise InvalidInputError(
            "notes", f"<{len(notes)} chars>", f"must be at most {NOTES_MAX_LENGTH} characters"
        )
    return notes
