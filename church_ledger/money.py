"""
Decimal helpers for money values.

All balances and amounts carry exactly two fractional digits.
"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Quantize a value to two places.

    Accepts Decimals, ints, floats and strings. Database sums can
    come back as floats on some backends, so floats go through str()
    first to avoid binary artifacts.
    """
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    """Render a money value as 1,234.56 (negative as -1,234.56)."""
    return f"{to_money(value):,.2f}"
