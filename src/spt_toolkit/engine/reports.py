"""
Module: engine.reports

Purpose:
    Per-student report assembly: average, CO summary, PO summary, and the
    text/comparison helpers used by exporters and the dashboard cards.

Key Functions:
    - build_student_report(): Student -> StudentReport
    - co_attainment_text(): "CO1: 85.00% (Level 3), ..." or "N/A"
    - three_year_comparison(): Latest record vs mean of the last three

Key Classes:
    - StudentReport: Computed results for one student
    - YearComparison: Result of three_year_comparison()

Dependencies:
    - engine.aggregator / engine.programs / engine.normalizer / engine.levels

Used By:
    - output.rows
    - spt_toolkit.controller
    - spt_toolkit.cli
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from statistics import fmean
from typing import Any, Dict, List, Mapping, Optional, Sequence

from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters
from spt_toolkit.core.models import COSummary, MarkRecord, POSummary, Student

from .aggregator import aggregate
from .levels import classify
from .normalizer import NOT_AVAILABLE, format_average, record_percentages, student_average
from .programs import aggregate_po

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentReport:
    """
    Computed results for one student (immutable).

    Attributes:
        student: Source student
        average: Student average, None without marks
        co_summary: Per-CO summaries, natural order
        po_summary: Per-PO summaries, natural order (empty without a mapping)
    """

    student: Student
    average: Optional[float]
    co_summary: tuple[COSummary, ...]
    po_summary: tuple[POSummary, ...] = ()

    @property
    def average_text(self) -> str:
        """Backend average when provided, else the computed one."""
        if self.student.average:
            return self.student.average
        return format_average(self.average)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as the calculate-co-po response plus identity fields."""
        return {
            "student_id": self.student.student_id,
            "name": self.student.name,
            "department": self.student.department,
            "average": self.average_text,
            "coSummary": [s.to_dict() for s in self.co_summary],
            "poSummary": [s.to_dict() for s in self.po_summary],
        }


def build_student_report(
    student: Student,
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
    *,
    po_mapping: Optional[Mapping[str, Mapping[str, float]]] = None,
    po_targets: Optional[Mapping[str, float]] = None,
    indirect: Optional[Mapping[str, float]] = None,
) -> StudentReport:
    """
    Compute the full report for a student.

    A student without mark records gets an empty CO summary and a None
    average; exporters render these as "N/A".
    """
    summary = aggregate(
        student.marks,
        params,
        targets=student.course_outcomes,
        indirect=indirect,
    )
    po_summary: Dict[str, POSummary] = {}
    if po_mapping and summary:
        po_summary = aggregate_po(summary, po_mapping, targets=po_targets, params=params)

    if not student.marks:
        logger.debug(f"Student {student.student_id} has no marks")

    return StudentReport(
        student=student,
        average=student_average(student.marks),
        co_summary=tuple(summary.values()),
        po_summary=tuple(po_summary.values()),
    )


def co_attainment_text(
    co_summary: Sequence[COSummary],
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
) -> str:
    """
    One-line CO attainment text for exports.

    Example:
        >>> co_attainment_text([COSummary("CO1", 85, 70, True)])
        'CO1: 85.00% (Level 3)'
    """
    if not co_summary:
        return NOT_AVAILABLE
    return ", ".join(
        f"{s.co_id}: {s.avg_attainment:.2f}% (Level {classify(s.avg_attainment, params)})"
        for s in co_summary
    )


@dataclass(frozen=True)
class YearComparison:
    """Latest record against the mean of the last three records."""

    avg_internal: float
    avg_exam: float
    internal_above_avg: bool
    exam_above_avg: bool

    def to_dict(self) -> Dict[str, str]:
        return {
            "avgInternal": f"{self.avg_internal:.2f}",
            "avgExam": f"{self.avg_exam:.2f}",
            "internalAboveAvg": "Above" if self.internal_above_avg else "Below",
            "examAboveAvg": "Above" if self.exam_above_avg else "Below",
        }


def three_year_comparison(records: Sequence[MarkRecord]) -> YearComparison:
    """
    Compare the latest record with the mean of the last three.

    With no records every value is 0 and both flags are False ("Below").
    """
    recent: List[MarkRecord] = list(records)[-3:]
    if not recent:
        return YearComparison(0.0, 0.0, False, False)
    percentages = [record_percentages(r) for r in recent]
    avg_internal = fmean(p[0] for p in percentages)
    avg_exam = fmean(p[1] for p in percentages)
    current_internal, current_exam = percentages[-1]
    return YearComparison(
        avg_internal=avg_internal,
        avg_exam=avg_exam,
        internal_above_avg=current_internal > avg_internal,
        exam_above_avg=current_exam > avg_exam,
    )
