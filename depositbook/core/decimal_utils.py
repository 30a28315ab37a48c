"""
DepositBook — Decimal Utilities
Central Decimal context setup and rounding helpers.
Never use float near monetary values — always use Decimal.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Union

# Set high-precision context globally for the process
getcontext().prec = 28

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def monetary(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Convert any numeric value to a Decimal suitable for monetary calculations.
    Raises TypeError on non-numeric input to prevent silent float contamination,
    ValueError on strings that are not numbers.
    """
    if isinstance(value, bool):
        raise TypeError("Cannot convert bool to Decimal monetary value")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Force via string to avoid float imprecision
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal amount: {value!r}") from exc
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal monetary value")


def display_round(amount: Decimal, places: int = 2) -> Decimal:
    """
    Round to `places` decimal places, ties away from zero (0.125 → 0.13,
    -0.125 → -0.13). Decimal's ROUND_HALF_UP is magnitude-based, unlike
    the builtin round() which rounds ties to even.
    """
    quantizer = Decimal(10) ** -places
    return amount.quantize(quantizer, rounding=ROUND_HALF_UP)
