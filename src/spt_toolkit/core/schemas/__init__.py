"""
Schemas Package

Validation for student payloads and import rows.
"""

from .validator import (
    IDENTITY_FIELDS,
    ValidationError,
    is_blank,
    missing_fields,
    validate_identity_row,
    validate_student,
)

__all__ = [
    "IDENTITY_FIELDS",
    "ValidationError",
    "is_blank",
    "missing_fields",
    "validate_identity_row",
    "validate_student",
]
