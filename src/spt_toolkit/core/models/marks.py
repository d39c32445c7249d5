"""
Module: marks

Purpose:
    Provides the mark dataclasses recorded per student per assessment
    period: MarkRecord (whole-period totals plus a per-CO breakdown) and
    COMarkEntry (one course outcome's share of the marks).

Key Classes:
    - AssessmentCategory: CIA tool a record's internal marks belong to
    - COMarkEntry: Per-CO marks within a record
    - MarkRecord: One assessment period for a student

Dependencies:
    - dataclasses (std)
    - enum (std)
    - spt_toolkit.common: number parsing, outcome ids

Used By:
    - core.models.students.Student
    - engine.normalizer / engine.aggregator
    - importing.spreadsheet
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from spt_toolkit.common.numbers import coerce_number
from spt_toolkit.common.outcomes import normalise_outcome_id

logger = logging.getLogger(__name__)


class AssessmentCategory(str, Enum):
    """Assessment tools of Continuous Internal Assessment (CIA)."""

    INTERNAL = "internal"
    ASSIGNMENT = "assignment"
    CLASS_TEST = "classTest"
    SEMINAR = "seminar"
    WORK_PROJECT = "workProject"

    @property
    def label(self) -> str:
        """Row label used in printed reports."""
        return _CATEGORY_LABELS[self]

    @property
    def counts_toward_cia(self) -> bool:
        """Whether the category enters the internal (CIA) average."""
        return self in (
            AssessmentCategory.INTERNAL,
            AssessmentCategory.ASSIGNMENT,
            AssessmentCategory.CLASS_TEST,
        )

    @classmethod
    def parse(cls, value: object) -> AssessmentCategory:
        """Lenient lookup ("Class Test", "class_test", "classTest" all match)."""
        if isinstance(value, cls):
            return value
        key = "".join(ch for ch in str(value or "").lower() if ch.isalnum())
        for member in cls:
            if key in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        if key in ("tutorial", "classtesttutorial", "test"):
            return cls.CLASS_TEST
        if key in ("project", "extracurricular"):
            return cls.WORK_PROJECT
        raise ValueError(f"Unknown assessment category: {value!r}")


_CATEGORY_LABELS = {
    AssessmentCategory.INTERNAL: "Internal Assessment",
    AssessmentCategory.ASSIGNMENT: "Assignment",
    AssessmentCategory.CLASS_TEST: "Class Test/Tutorial",
    AssessmentCategory.SEMINAR: "Seminar",
    AssessmentCategory.WORK_PROJECT: "Work Project/Extra Curricular",
}


@dataclass(frozen=True, slots=True)
class COMarkEntry:
    """
    Marks for one course outcome within a MarkRecord.

    Any numeric field may be None when the source did not record it. The
    internal portion counts as recorded when either its marks or its total
    is present; a recorded portion with a zero/missing total normalizes to 0.

    Attributes:
        co_id: Canonical outcome id like "CO1"
        internal: Internal marks scored
        exam: Exam (SEE) marks scored
        total_internal: Maximum internal marks
        total_exam: Maximum exam marks

    Example:
        >>> e = COMarkEntry("CO1", internal=8, total_internal=10)
        >>> e.has_internal, e.has_exam
        (True, False)
    """

    co_id: str
    internal: Optional[float] = None
    exam: Optional[float] = None
    total_internal: Optional[float] = None
    total_exam: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate entry on construction."""
        if not self.co_id:
            raise ValueError("co_id must not be empty")

    @property
    def has_internal(self) -> bool:
        return self.internal is not None or self.total_internal is not None

    @property
    def has_exam(self) -> bool:
        return self.exam is not None or self.total_exam is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the backend's camelCase shape (None fields omitted)."""
        data: Dict[str, Any] = {"coId": self.co_id}
        for key, value in (
            ("internal", self.internal),
            ("exam", self.exam),
            ("totalInternal", self.total_internal),
            ("totalExam", self.total_exam),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> COMarkEntry:
        """
        Parse from camelCase or snake_case keys.

        Raises:
            ValueError: If the co id is missing
        """
        co_id = normalise_outcome_id(data.get("coId", data.get("co_id")))
        return cls(
            co_id=co_id,
            internal=coerce_number(data.get("internal")),
            exam=coerce_number(data.get("exam")),
            total_internal=coerce_number(_first(data, "totalInternal", "total_internal")),
            total_exam=coerce_number(_first(data, "totalExam", "total_exam")),
        )


@dataclass(frozen=True)
class MarkRecord:
    """
    One assessment period's marks for a student (immutable).

    Attributes:
        year: Period label like "2024" or "2024-S1"
        internal: Internal marks scored for the whole period
        exam: Exam marks scored for the whole period
        total_internal: Maximum internal marks
        total_exam: Maximum exam marks
        co_mapping: Per-CO breakdown, co ids unique
        category: CIA tool the internal marks belong to
        instance: Which occurrence of the tool (Internal Assessment 2 -> 2)

    Invariants:
        - co ids in co_mapping are unique
        - instance >= 1
    """

    year: str = ""
    internal: Optional[float] = None
    exam: Optional[float] = None
    total_internal: Optional[float] = None
    total_exam: Optional[float] = None
    co_mapping: Tuple[COMarkEntry, ...] = ()
    category: AssessmentCategory = AssessmentCategory.INTERNAL
    instance: int = 1

    def __post_init__(self) -> None:
        """Validate record on construction."""
        seen = set()
        for entry in self.co_mapping:
            if entry.co_id in seen:
                raise ValueError(f"Duplicate co_id in co_mapping: {entry.co_id}")
            seen.add(entry.co_id)
        if self.instance < 1:
            raise ValueError(f"instance must be >= 1: {self.instance}")

    def __iter__(self) -> Iterator[COMarkEntry]:
        return iter(self.co_mapping)

    def entry(self, co_id: str) -> Optional[COMarkEntry]:
        """Find the entry for a co id, None if the record has none."""
        for item in self.co_mapping:
            if item.co_id == co_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"year": self.year}
        for key, value in (
            ("internal", self.internal),
            ("exam", self.exam),
            ("totalInternal", self.total_internal),
            ("totalExam", self.total_exam),
        ):
            if value is not None:
                data[key] = value
        data["coMapping"] = [e.to_dict() for e in self.co_mapping]
        if self.category is not AssessmentCategory.INTERNAL or self.instance != 1:
            data["category"] = self.category.value
            data["instance"] = self.instance
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MarkRecord:
        """
        Parse a backend mark record.

        Entries without a co id and duplicate co ids are skipped with a
        warning rather than failing the whole record.
        """
        entries = []
        seen = set()
        for raw in data.get("coMapping", data.get("co_mapping")) or []:
            try:
                entry = COMarkEntry.from_dict(raw)
            except (ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed CO entry {raw!r}: {e}")
                continue
            if entry.co_id in seen:
                logger.warning(f"Skipping duplicate CO entry {entry.co_id}")
                continue
            seen.add(entry.co_id)
            entries.append(entry)

        category = AssessmentCategory.INTERNAL
        if data.get("category"):
            try:
                category = AssessmentCategory.parse(data["category"])
            except ValueError as e:
                logger.warning(f"{e}; treating record as internal")

        instance = coerce_number(data.get("instance"))
        return cls(
            year=str(data.get("year") or ""),
            internal=coerce_number(data.get("internal")),
            exam=coerce_number(data.get("exam")),
            total_internal=coerce_number(_first(data, "totalInternal", "total_internal")),
            total_exam=coerce_number(_first(data, "totalExam", "total_exam")),
            co_mapping=tuple(entries),
            category=category,
            instance=max(1, int(instance)) if instance is not None else 1,
        )


def _first(data: Dict[str, Any], *keys: str) -> Any:
    """First present value among alternative key spellings."""
    for key in keys:
        if key in data:
            return data[key]
    return None
