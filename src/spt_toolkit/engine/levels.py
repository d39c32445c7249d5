"""
Module: engine.levels

Purpose:
    Map an attainment percentage to an ordinal attainment level (1-3).
    Thresholds are inclusive lower bounds taken from AttainmentParameters.
"""

from __future__ import annotations

from spt_toolkit.common.numbers import coerce_number
from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters


def classify(percentage: object, params: AttainmentParameters = ATTAINMENT_PARAMETERS) -> int:
    """
    Attainment level of a percentage.

    Args:
        percentage: Attainment percentage
        params: Supplies level2/level3 thresholds (default 60/70)

    Returns:
        3 if percentage >= level3, 2 if >= level2, else 1. Non-numeric
        input is level 1.

    Example:
        >>> classify(70), classify(69.99), classify(59)
        (3, 2, 1)
    """
    value = coerce_number(percentage)
    if value is None:
        return 1
    if value >= params.level3:
        return 3
    if value >= params.level2:
        return 2
    return 1
