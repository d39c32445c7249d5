"""
Module: output.rows

Purpose:
    Flatten students and their CO summaries into export rows shared by the
    Excel and PDF exporters.

Key Functions:
    - build_export_rows(): Students + summaries -> [ExportRow]
    - group_by_department(): Rows grouped in first-seen department order
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters
from spt_toolkit.core.models import COSummary, Student
from spt_toolkit.engine.normalizer import format_average, student_average
from spt_toolkit.engine.reports import co_attainment_text

EXPORT_HEADERS = ("studentId", "name", "department", "average", "coAttainment")


@dataclass(frozen=True)
class ExportRow:
    """One exported student line."""

    student_id: str
    name: str
    department: str
    average: str
    co_attainment: str

    def as_tuple(self) -> tuple[str, str, str, str, str]:
        return (self.student_id, self.name, self.department, self.average, self.co_attainment)

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(EXPORT_HEADERS, self.as_tuple()))


def build_export_rows(
    students: Iterable[Student],
    summaries: Mapping[str, Sequence[COSummary]],
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
) -> List[ExportRow]:
    """
    Build export rows.

    Args:
        students: Students in export order
        summaries: student_id -> CO summaries; a missing or empty entry
            exports as "N/A"
        params: Level thresholds for the level text

    Example:
        >>> rows = build_export_rows([student], {"S1": [COSummary("CO1", 85, 70, True)]})
        >>> rows[0].co_attainment
        'CO1: 85.00% (Level 3)'
    """
    rows = []
    for student in students:
        co_summary = summaries.get(student.student_id) or ()
        if isinstance(co_summary, Mapping):
            co_summary = list(co_summary.values())
        rows.append(ExportRow(
            student_id=student.student_id,
            name=student.name,
            department=student.department,
            average=_average_text(student),
            co_attainment=co_attainment_text(co_summary, params),
        ))
    return rows


def group_by_department(rows: Iterable[ExportRow]) -> Dict[str, List[ExportRow]]:
    groups: Dict[str, List[ExportRow]] = {}
    for row in rows:
        groups.setdefault(row.department, []).append(row)
    return groups


def _average_text(student: Student) -> str:
    average: Optional[str] = student.average
    if average:
        return average
    return format_average(student_average(student.marks))
