"""
Module: importing.spreadsheet

Purpose:
    Bulk student import from Excel workbooks. Rows are keyed by their
    (case/whitespace-insensitive) column headers; CO columns are numbered
    dynamically ("co1 internal marks", "co2 internal marks", ...) and are
    discovered until the next number is absent.

Key Functions:
    - read_rows(): Header-keyed rows from every sheet (openpyxl)
    - iter_co_columns(): Lazy (co_id, fields) pairs of one row
    - parse_student_row(): One row -> Student
    - parse_student_rows(): Many rows -> ImportResult
    - import_students(): Workbook path -> ImportResult

Key Classes:
    - SheetRow: One data row with its location
    - DroppedRow: A row rejected during import
    - ImportResult: Imported students plus dropped rows

Dependencies:
    - openpyxl: Workbook reading
    - core.schemas.validator: identity-field check

Used By:
    - spt_toolkit.cli: ``import`` command
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from openpyxl import load_workbook

from spt_toolkit.common.numbers import coerce_number
from spt_toolkit.core.models import (
    AssessmentCategory,
    COMarkEntry,
    CourseOutcomeTarget,
    MarkRecord,
    Student,
)
from spt_toolkit.core.schemas.validator import ValidationError, validate_identity_row
from spt_toolkit.errors import MalformedRowError

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")

# Per-CO column suffixes -> field names
CO_FIELDS = (
    ("internal marks", "internal"),
    ("internal total", "total_internal"),
    ("exam marks", "exam"),
    ("exam total", "total_exam"),
    ("target %", "target"),
)


def normalise_header(value: Any) -> str:
    """Lower-case header with collapsed whitespace ("CO1  Internal Marks" -> "co1 internal marks")."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip().lower()


@dataclass(frozen=True)
class SheetRow:
    """One data row and where it came from."""

    sheet: str
    row_number: int
    values: Dict[str, Any]


@dataclass(frozen=True)
class DroppedRow:
    """A row rejected during import."""

    sheet: str
    row_number: int
    reason: str


@dataclass
class ImportResult:
    """
    Outcome of an import batch.

    Attributes:
        students: Imported students, rows for the same id merged in order
        dropped: Rejected rows with reasons
    """

    students: List[Student] = field(default_factory=list)
    dropped: List[DroppedRow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "students": [s.to_dict() for s in self.students],
            "dropped": [
                {"sheet": d.sheet, "row": d.row_number, "reason": d.reason}
                for d in self.dropped
            ],
        }


# ─────────────────────────────────────────────────────────────────────────────
# Reading
# ─────────────────────────────────────────────────────────────────────────────

def read_rows(path: Path) -> Iterator[SheetRow]:
    """
    Yield header-keyed rows from every sheet of a workbook.

    The first non-empty row of each sheet is the header. Completely empty
    rows are skipped.

    Raises:
        FileNotFoundError: If path doesn't exist
    """
    if not Path(path).exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
    try:
        for sheet in workbook.worksheets:
            headers: Optional[List[str]] = None
            for row_number, cells in enumerate(sheet.iter_rows(values_only=True), start=1):
                if cells is None or all(c is None or str(c).strip() == "" for c in cells):
                    continue
                if headers is None:
                    headers = [normalise_header(c) for c in cells]
                    continue
                values = {
                    header: cell
                    for header, cell in zip(headers, cells)
                    if header
                }
                yield SheetRow(sheet.title, row_number, values)
    finally:
        workbook.close()


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────

def iter_co_columns(row: Mapping[str, Any]) -> Iterator[Tuple[str, Dict[str, Optional[float]]]]:
    """
    Yield (co_id, fields) for co1, co2, ... until "co{N} internal marks" is absent.

    Lazy and restartable: each call starts again from co1.

    Example:
        >>> list(iter_co_columns({"co1 internal marks": 8, "co1 internal total": 10}))
        [('CO1', {'internal': 8.0, 'total_internal': 10.0, 'exam': None, 'total_exam': None, 'target': None})]
    """
    keys = {normalise_header(k): v for k, v in row.items()}
    n = 1
    while f"co{n} internal marks" in keys:
        fields = {
            name: coerce_number(keys.get(f"co{n} {suffix}"))
            for suffix, name in CO_FIELDS
        }
        yield f"CO{n}", fields
        n += 1


def parse_student_row(row: Mapping[str, Any], row_number: int = 0) -> Student:
    """
    Build a Student holding one MarkRecord from an import row.

    Raises:
        MalformedRowError: If student id, name or department is missing
    """
    values = {normalise_header(k): v for k, v in row.items()}
    try:
        validate_identity_row(values)
    except ValidationError as e:
        missing = tuple(err.removeprefix("Missing field: ") for err in e.errors)
        raise MalformedRowError(
            f"Row {row_number}: missing {', '.join(missing)}",
            row_number=row_number,
            missing=missing,
        ) from e

    entries = []
    targets = []
    for co_id, fields in iter_co_columns(values):
        marks = (fields["internal"], fields["total_internal"], fields["exam"], fields["total_exam"])
        if any(v is not None for v in marks):
            entries.append(COMarkEntry(
                co_id=co_id,
                internal=fields["internal"],
                exam=fields["exam"],
                total_internal=fields["total_internal"],
                total_exam=fields["total_exam"],
            ))
        if fields["target"] is not None:
            targets.append(CourseOutcomeTarget.from_dict({"coId": co_id, "target": fields["target"]}))

    category = AssessmentCategory.INTERNAL
    if values.get("category"):
        try:
            category = AssessmentCategory.parse(values["category"])
        except ValueError as e:
            logger.warning(f"Row {row_number}: {e}; treating as internal")
    instance = coerce_number(values.get("instance"))

    record = MarkRecord(
        year=_text(values.get("year")),
        internal=coerce_number(values.get("internal marks")),
        exam=coerce_number(values.get("exam marks")),
        total_internal=coerce_number(values.get("internal total")),
        total_exam=coerce_number(values.get("exam total")),
        co_mapping=tuple(entries),
        category=category,
        instance=max(1, int(instance)) if instance is not None else 1,
    )
    return Student(
        student_id=_text(values["student id"]),
        name=_text(values["name"]),
        department=_text(values["department"]),
        marks=(record,),
        course_outcomes=tuple(targets),
    )


def parse_student_rows(
    rows: Iterable[Mapping[str, Any] | SheetRow],
    *,
    sheet: str = "",
    start_row: int = 2,
) -> ImportResult:
    """
    Parse a batch of import rows.

    A malformed row is dropped and recorded; the rest of the batch is still
    imported. Rows sharing a student id are merged into one Student (marks
    appended in row order, later CO targets override earlier ones).

    Args:
        rows: Header-keyed mappings or SheetRow objects
        sheet: Sheet name for plain mappings
        start_row: Row number of the first plain mapping (header is row 1)
    """
    result = ImportResult()
    merged: Dict[str, Student] = {}

    for offset, item in enumerate(rows):
        if isinstance(item, SheetRow):
            sheet_name, row_number, values = item.sheet, item.row_number, item.values
        else:
            sheet_name, row_number, values = sheet, start_row + offset, item
        try:
            student = parse_student_row(values, row_number)
        except MalformedRowError as e:
            logger.warning(f"Dropping row {row_number}{f' of {sheet_name}' if sheet_name else ''}: {e}")
            result.dropped.append(DroppedRow(sheet_name, row_number, str(e)))
            continue

        existing = merged.get(student.student_id)
        merged[student.student_id] = _merge(existing, student) if existing else student

    result.students = list(merged.values())
    logger.info(f"Imported {len(result.students)} students, dropped {len(result.dropped)} rows")
    return result


def import_students(path: Path) -> ImportResult:
    """Read and parse every sheet of a student workbook."""
    return parse_student_rows(read_rows(path))


def _merge(first: Student, second: Student) -> Student:
    targets = {t.co_id: t for t in first.course_outcomes}
    targets.update({t.co_id: t for t in second.course_outcomes})
    return Student(
        student_id=first.student_id,
        name=first.name,
        department=first.department,
        marks=first.marks + second.marks,
        course_outcomes=tuple(targets.values()),
    )


def _text(value: Any) -> str:
    """Cell text; whole floats lose their ".0" (101.0 -> "101")."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
