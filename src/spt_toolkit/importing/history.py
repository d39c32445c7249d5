"""
Module: importing.history

Purpose:
    Historical university performance import. Each sheet of the workbook
    describes one course offering:

        Row 1, first cell: year          (e.g. 2022)
        Row 2, first cell: department    (e.g. CSE)
        Row 3, first cell: course        (e.g. Prog101)
        Row 4:             headers       (Reg No, Grade, Mark)
        Row 5+:            students

    Sheets are merged into {year: {department: {course: [StudentMark]}}};
    a later sheet for the same year/department/course replaces the earlier.

Key Functions:
    - parse_history_sheet(): Raw sheet rows -> CourseSheet
    - load_history(): Workbook path -> HistoricalData
    - average_co(): Mean mark of a student list
    - predict_next(): Growth forecast capped at 100
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from statistics import fmean
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openpyxl import load_workbook

from spt_toolkit.common.numbers import coerce_number, round2
from spt_toolkit.common.thresholds import FORECAST_THRESHOLDS, ForecastThresholds
from spt_toolkit.errors import MalformedRowError

logger = logging.getLogger(__name__)

HEADER_ROWS = 4

HistoryTree = Dict[str, Dict[str, Dict[str, List["StudentMark"]]]]


@dataclass(frozen=True)
class StudentMark:
    """One student row of a historical sheet. Missing marks count as 0."""

    reg_no: str
    grade: str = ""
    mark: float = 0.0


@dataclass(frozen=True)
class CourseSheet:
    """Parsed contents of one sheet."""

    year: str
    department: str
    course: str
    students: tuple[StudentMark, ...] = ()


def average_co(students: Iterable[StudentMark]) -> float:
    """Mean mark rounded to 2 places; 0 for no students."""
    marks = [s.mark for s in students]
    return round2(fmean(marks)) if marks else 0.0


def predict_next(current: float, thresholds: ForecastThresholds = FORECAST_THRESHOLDS) -> float:
    """
    Next-period forecast: fixed growth capped at the ceiling.

    Example:
        >>> predict_next(80)
        84.0
        >>> predict_next(98)
        100.0
    """
    return round2(min(current * thresholds.growth_factor, thresholds.ceiling))


@dataclass
class HistoricalData:
    """Nested year -> department -> course -> students tree."""

    tree: HistoryTree = field(default_factory=dict)

    def add(self, sheet: CourseSheet) -> None:
        self.tree.setdefault(sheet.year, {}).setdefault(sheet.department, {})[sheet.course] = list(sheet.students)

    @property
    def years(self) -> List[str]:
        return list(self.tree)

    @property
    def departments(self) -> List[str]:
        return list(dict.fromkeys(d for year in self.tree.values() for d in year))

    @property
    def courses(self) -> List[str]:
        return list(dict.fromkeys(
            c for year in self.tree.values() for dept in year.values() for c in dept
        ))

    def students_for(
        self,
        *,
        year: Optional[str] = None,
        department: Optional[str] = None,
        course: Optional[str] = None,
    ) -> List[StudentMark]:
        """All students matching the given filters (None matches anything)."""
        result: List[StudentMark] = []
        for y, departments in self.tree.items():
            if year is not None and y != year:
                continue
            for d, courses in departments.items():
                if department is not None and d != department:
                    continue
                for c, students in courses.items():
                    if course is not None and c != course:
                        continue
                    result.extend(students)
        return result

    def co_by_year(self) -> Dict[str, float]:
        return {y: average_co(self.students_for(year=y)) for y in self.years}

    def co_by_department(self) -> Dict[str, float]:
        return {d: average_co(self.students_for(department=d)) for d in self.departments}

    def co_by_course(self) -> Dict[str, float]:
        return {c: average_co(self.students_for(course=c)) for c in self.courses}

    def is_empty(self) -> bool:
        return not self.tree


def parse_history_sheet(rows: Sequence[Sequence[Any]], sheet: str = "") -> CourseSheet:
    """
    Parse the raw rows of one sheet.

    Raises:
        MalformedRowError: If year, department or course is missing
    """
    header = [_first_cell(rows, i) for i in range(3)]
    missing = tuple(
        name for name, value in zip(("year", "department", "course"), header) if not value
    )
    if missing:
        raise MalformedRowError(
            f"Sheet {sheet or '?'}: missing {', '.join(missing)}",
            row_number=next(i + 1 for i, v in enumerate(header) if not v),
            missing=missing,
        )

    students = []
    for row in rows[HEADER_ROWS:]:
        cells = list(row or ())
        if not cells or all(c is None or str(c).strip() == "" for c in cells):
            continue
        cells += [None] * (3 - len(cells))
        mark = coerce_number(cells[2])
        students.append(StudentMark(
            reg_no=_cell_text(cells[0]),
            grade=_cell_text(cells[1]),
            mark=mark if mark is not None else 0.0,
        ))
    return CourseSheet(header[0], header[1], header[2], tuple(students))


def load_history(path: Path) -> HistoricalData:
    """
    Load every sheet of a historical workbook.

    A sheet without year/department/course is skipped with a warning.
    """
    if not Path(path).exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    data = HistoricalData()
    workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
    try:
        for sheet in workbook.worksheets:
            rows = [tuple(r) for r in sheet.iter_rows(values_only=True)]
            try:
                data.add(parse_history_sheet(rows, sheet.title))
            except MalformedRowError as e:
                logger.warning(f"Skipping sheet {sheet.title}: {e}")
    finally:
        workbook.close()
    logger.info(f"Loaded history for {len(data.years)} years")
    return data


def _first_cell(rows: Sequence[Sequence[Any]], index: int) -> str:
    if index >= len(rows) or not rows[index]:
        return ""
    return _cell_text(rows[index][0])


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
