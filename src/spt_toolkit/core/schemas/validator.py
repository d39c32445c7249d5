"""
Schema Validation Utilities

Validates student payloads coming from the backend or from spreadsheets
before they are turned into models.

The backend occasionally returns records without a usable ``student_id``;
the dashboard filtered those out before rendering. The same identity check
guards spreadsheet import, where a row lacking any identity field is
dropped while the rest of the batch goes through.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


# Identity fields every imported row must carry
IDENTITY_FIELDS = ("student id", "name", "department")


class ValidationError(Exception):
    """Raised when data fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def is_blank(value: Any) -> bool:
    """True for None, empty/whitespace strings and NaN-like floats."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return value != value
    return False


def missing_fields(data: Mapping[str, Any], required: Iterable[str]) -> list[str]:
    """Names of required keys that are absent or blank."""
    return [name for name in required if is_blank(data.get(name))]


def validate_student(data: Mapping[str, Any]) -> None:
    """
    Validate a backend student record.

    Args:
        data: Student dictionary from GET /students

    Raises:
        ValidationError: If the record has no non-blank string student_id,
            or its Marks/CourseOutcomes are not lists
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Student record must be an object: {type(data).__name__}")

    student_id = data.get("student_id", data.get("studentId"))
    if not isinstance(student_id, str) or not student_id.strip():
        raise ValidationError(
            f"Invalid student_id: {student_id!r} (must be a non-blank string)",
            path="student_id",
        )

    errors = []
    for key in ("Marks", "CourseOutcomes"):
        if key in data and data[key] is not None and not isinstance(data[key], list):
            errors.append(f"{key} must be a list")
    if errors:
        raise ValidationError(
            f"Invalid student {student_id!r}: {', '.join(errors)}",
            path=student_id,
            errors=errors,
        )


def validate_identity_row(row: Mapping[str, Any]) -> None:
    """
    Validate that an import row carries every identity field.

    Args:
        row: Header-keyed row (lower-case header names)

    Raises:
        ValidationError: Listing the missing fields
    """
    missing = missing_fields(row, IDENTITY_FIELDS)
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing],
        )
