"""
ProductsCatalog — Decimal Utilities
Rounding helpers for prices and cart totals.
Never use float near monetary values — always use Decimal.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import Union

getcontext().prec = 28


def monetary(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Convert any numeric value to a Decimal suitable for monetary calculations.
    None (e.g. SUM over no rows) becomes zero.
    Raises TypeError on non-numeric input to prevent silent float contamination.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Force via string to avoid float imprecision
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        return Decimal(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal monetary value")


def display_round(amount: Decimal, places: int = 2) -> Decimal:
    """Round to `places` decimal places for display/reporting only."""
    quantizer = Decimal(10) ** -places
    return amount.quantize(quantizer, rounding=ROUND_HALF_UP)
