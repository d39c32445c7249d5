"""
Module: engine.targets

Purpose:
    Propose next-period CO targets from observed attainment.

    Rule: when attainment beats the target by more than the overshoot
    margin (10), raise the target by one step (5), capped at 100. Targets
    never decrease, so the rule is idempotent once the gap closes.

Key Functions:
    - adjust(): New target list for a student
    - next_target(): Rule for a single target

Dependencies:
    - common.thresholds: TARGET_THRESHOLDS

Used By:
    - spt_toolkit.controller: update-marks flow
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Union

from spt_toolkit.common.thresholds import TARGET_THRESHOLDS, TargetAdjustmentThresholds
from spt_toolkit.core.models import COSummary, CourseOutcomeTarget

logger = logging.getLogger(__name__)

SummaryLike = Union[Mapping[str, COSummary], Iterable[COSummary], None]


def next_target(
    target: float,
    attainment: float,
    thresholds: TargetAdjustmentThresholds = TARGET_THRESHOLDS,
) -> float:
    """
    Next-period target for one CO.

    Example:
        >>> next_target(70, 85)
        75
        >>> next_target(95, 110)
        100
        >>> next_target(70, 80)
        70
    """
    if attainment > target + thresholds.overshoot_margin:
        return min(target + thresholds.step, thresholds.ceiling)
    return target


def adjust(
    current_targets: Iterable[CourseOutcomeTarget],
    summary: SummaryLike,
    thresholds: TargetAdjustmentThresholds = TARGET_THRESHOLDS,
) -> List[CourseOutcomeTarget]:
    """
    Adjust every target against the CO summary.

    Args:
        current_targets: Stored targets (not modified)
        summary: CO id -> COSummary, or a list of summaries. COs missing
            from the summary are treated as 0% attainment (unchanged).
        thresholds: Margin/step/ceiling of the rule

    Returns:
        New target list in the same order.
    """
    by_co = _summary_map(summary)
    adjusted = []
    for item in current_targets:
        co_summary = by_co.get(item.co_id)
        attainment = co_summary.avg_attainment if co_summary else 0.0
        new_value = next_target(item.target, attainment, thresholds)
        if new_value != item.target:
            logger.info(f"{item.co_id}: target {item.target} -> {new_value} (attainment {attainment:.2f})")
            adjusted.append(replace(item, target=new_value))
        else:
            adjusted.append(item)
    return adjusted


def _summary_map(summary: SummaryLike) -> Mapping[str, COSummary]:
    if summary is None:
        return {}
    if isinstance(summary, Mapping):
        return summary
    return {s.co_id: s for s in summary}
