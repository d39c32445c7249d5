"""
Module: students

Purpose:
    Provides the Student dataclass - the per-student record exchanged with
    the persistence backend: identity fields, mark history and CO targets.

Key Functions:
    - Student.from_dict(): Parse the backend/dashboard JSON shape
    - Student.to_dict(): Serialize for POST /students
    - Student.target_for(): Look up a CO target with default
    - filter_students(): Case-insensitive id/name/department search

Dependencies:
    - .marks.MarkRecord
    - .outcomes.CourseOutcomeTarget

Used By:
    - core.utils.serialization
    - engine.reports
    - importing.spreadsheet
    - client.api
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS

from .marks import MarkRecord
from .outcomes import CourseOutcomeTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Student:
    """
    Student record (immutable).

    Attributes:
        student_id: Non-blank identifier
        name: Display name
        department: Department code like "CSE"
        marks: Mark history, oldest first
        course_outcomes: Stored CO targets
        average: Backend-provided average, if any (kept verbatim)

    Invariants:
        - student_id is a non-blank string
    """

    student_id: str
    name: str = ""
    department: str = ""
    marks: Tuple[MarkRecord, ...] = ()
    course_outcomes: Tuple[CourseOutcomeTarget, ...] = ()
    average: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate student on construction."""
        if not isinstance(self.student_id, str) or not self.student_id.strip():
            raise ValueError(f"student_id must be a non-blank string: {self.student_id!r}")

    def target_for(self, co_id: str, default: float = ATTAINMENT_PARAMETERS.default_target) -> float:
        """Stored target for a CO, or default."""
        for item in self.course_outcomes:
            if item.co_id == co_id:
                return item.target
        return default

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the shape the dashboard posts to the backend."""
        return {
            "studentId": self.student_id,
            "name": self.name,
            "department": self.department,
            "marks": [m.to_dict() for m in self.marks],
            "courseOutcomes": [c.to_dict() for c in self.course_outcomes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Student:
        """
        Parse a backend student record.

        Accepts the backend keys (``student_id``, ``Marks``,
        ``CourseOutcomes``) and the dashboard's camelCase keys. Malformed
        mark records and targets are skipped with a warning.

        Raises:
            ValueError: If student_id is missing or blank
        """
        student_id = data.get("student_id", data.get("studentId"))
        if isinstance(student_id, (int, float)) and not isinstance(student_id, bool):
            student_id = str(student_id)

        marks = []
        for raw in _first_list(data, "Marks", "marks"):
            try:
                marks.append(MarkRecord.from_dict(raw))
            except (ValueError, AttributeError, TypeError) as e:
                logger.warning(f"Skipping malformed mark record for {student_id!r}: {e}")

        targets = []
        for raw in _first_list(data, "CourseOutcomes", "courseOutcomes", "course_outcomes"):
            try:
                targets.append(CourseOutcomeTarget.from_dict(raw))
            except (ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed CO target for {student_id!r}: {e}")

        average = data.get("average")
        return cls(
            student_id=student_id.strip() if isinstance(student_id, str) else student_id,
            name=str(data.get("name") or ""),
            department=str(data.get("department") or ""),
            marks=tuple(marks),
            course_outcomes=tuple(targets),
            average=str(average) if average not in (None, "") else None,
        )


def _first_list(data: Dict[str, Any], *keys: str) -> list:
    for key in keys:
        value = data.get(key)
        if isinstance(value, list):
            return value
    return []


def filter_students(
    students: Iterable[Student],
    *,
    student_id: str = "",
    name: str = "",
    department: str = "",
) -> List[Student]:
    """
    Students whose id, name and department contain the given text.

    Matching is case-insensitive substring; every non-empty criterion must
    match, and blank criteria match everything. Input order is kept.

    Example:
        >>> [s.student_id for s in filter_students(roster, department="cs")]
        ['S1', 'S3']
    """
    criteria = [
        (field_name, text.strip().lower())
        for field_name, text in (("student_id", student_id), ("name", name), ("department", department))
        if text and text.strip()
    ]
    return [
        s for s in students
        if all(needle in getattr(s, field_name).lower() for field_name, needle in criteria)
    ]
