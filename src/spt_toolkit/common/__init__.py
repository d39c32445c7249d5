"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .outcomes import (
    normalise_outcome_id,
    outcome_number,
    outcome_sort_key,
    sorted_outcomes,
)
from .thresholds import (
    AttainmentParameters,
    ATTAINMENT_PARAMETERS,
    TARGET_THRESHOLDS,
    FORECAST_THRESHOLDS,
)

__all__ = [
    # outcomes
    "normalise_outcome_id",
    "outcome_number",
    "outcome_sort_key",
    "sorted_outcomes",
    # thresholds
    "AttainmentParameters",
    "ATTAINMENT_PARAMETERS",
    "TARGET_THRESHOLDS",
    "FORECAST_THRESHOLDS",
]
