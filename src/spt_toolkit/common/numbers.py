"""
Module: common.numbers

Purpose:
    Lenient numeric parsing for marks that arrive as JSON numbers, form
    strings or spreadsheet cells. Bad values become None so callers can
    decide between "missing" and "zero" instead of crashing.

Key Functions:
    - coerce_number(): Parse a value into a finite float or None
    - round2(): Round half-up to two decimals for display parity
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional


def coerce_number(value: object) -> Optional[float]:
    """
    Parse a value into a finite float.

    Args:
        value: int/float, numeric string (whitespace and a trailing "%"
            are tolerated), or anything else.

    Returns:
        The float value, or None for None/blank/non-numeric/NaN/inf input.
        Booleans are rejected.

    Example:
        >>> coerce_number(" 40 ")
        40.0
        >>> coerce_number("abc") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().rstrip("%").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def round2(value: float) -> float:
    """Round half-up to 2 decimals (70.005 -> 70.01, matching toFixed-style output); 0 for NaN/inf."""
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0.0
    try:
        return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return 0.0
