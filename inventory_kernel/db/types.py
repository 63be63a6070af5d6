"""
Module: inventory_kernel.db.types
Responsibility: Column type helpers and the money rounding helper shared by
    models, services and reports.
Architecture position: Kernel > DB.  MUST NOT import from models/, services/,
    selectors/ or domain/.

Invariants enforced:
    - Quantities are integers; stock never uses floats.
    - round_money() is the only rounding applied to reported valuation.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import BigInteger, Integer

# Free-text movement notes
NOTES_MAX_LENGTH = 500

# Auto-incrementing surrogate key.  SQLite only auto-assigns rowids for
# columns declared exactly INTEGER PRIMARY KEY.
IdentityKey = BigInteger().with_variant(Integer(), "sqlite")

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Args:
        value: Amount to round.
        decimal_places: Places to keep (default 2).
        rounding: Decimal rounding mode.

    Returns:
        The quantized Decimal.
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=rounding)
