"""
Money helpers for billing calculations.

Uses Decimal for precise financial calculations. Amounts are carried
unrounded through a calculation and quantized once at the output boundary.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

ZERO = Decimal("0")

# Birr and cents
MONEY_PLACES = Decimal("0.01")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Coerce a raw numeric value to Decimal.

    Floats go through str() so 0.1 stays 0.1. Missing, non-numeric,
    NaN and infinite values return ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not result.is_finite():
        return default
    return result


def round_money(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places, half up."""
    return amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
