"""
Module: engine.normalizer

Purpose:
    Convert raw (scored, total) pairs into percentages. Every path here
    fails soft: a zero, missing or non-numeric denominator yields 0 rather
    than raising or leaking NaN/inf into a report.

Key Functions:
    - normalize(): (scored / total) * 100 clamped to [0, 100]
    - record_percentages(): Internal and exam percentage of a MarkRecord
    - student_average(): Mean percentage across a student's records
    - format_average(): Two-decimal text, "N/A" when undefined

Dependencies:
    - spt_toolkit.common.numbers

Used By:
    - engine.aggregator
    - engine.reports
    - output.charts
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple

from spt_toolkit.common.numbers import coerce_number, round2
from spt_toolkit.core.models import MarkRecord

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def normalize(scored: object, total: object) -> float:
    """
    Percentage of total scored, clamped to [0, 100].

    Args:
        scored: Marks scored (number or numeric string)
        total: Maximum marks (number or numeric string)

    Returns:
        Percentage in [0, 100]; 0 when total is zero, negative, missing or
        non-numeric, or when scored is non-numeric.

    Example:
        >>> normalize(40, 50)
        80.0
        >>> normalize(5, 0)
        0.0
    """
    denominator = coerce_number(total)
    if denominator is None or denominator <= 0:
        logger.debug(f"Missing denominator ({total!r}); contributing 0%")
        return 0.0
    numerator = coerce_number(scored)
    if numerator is None:
        return 0.0
    result = numerator / denominator * 100
    if not math.isfinite(result):
        return 0.0
    return min(max(result, 0.0), 100.0)


def record_percentages(record: MarkRecord) -> Tuple[float, float]:
    """Internal and exam percentage of a whole record."""
    return (
        normalize(record.internal, record.total_internal),
        normalize(record.exam, record.total_exam),
    )


def student_average(records: Sequence[MarkRecord]) -> Optional[float]:
    """
    Overall average for a student.

    Each record contributes the mean of its internal and exam percentages;
    the student average is the mean over records, rounded to 2 decimals.

    Returns:
        The average, or None when there are no records.

    Example:
        >>> student_average([MarkRecord(internal=40, total_internal=50,
        ...                             exam=30, total_exam=50)])
        70.0
    """
    if not records:
        return None
    total = 0.0
    for record in records:
        internal_pct, exam_pct = record_percentages(record)
        total += (internal_pct + exam_pct) / 2
    return round2(total / len(records))


def format_average(value: Optional[float]) -> str:
    """Display form of an average ("70.00"), "N/A" when undefined."""
    if value is None or not math.isfinite(value):
        return NOT_AVAILABLE
    return f"{round2(value):.2f}"
