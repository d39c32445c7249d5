"""
Student Performance Tracker Core Package

Shared data models and serialization utilities. These models are the single
source of truth for everything exchanged with the persistence backend and
with the import/export collaborators.
"""

from .models import (
    AssessmentCategory,
    COMarkEntry,
    MarkRecord,
    CourseOutcomeTarget,
    COSummary,
    POSummary,
    Student,
)

__all__ = [
    "AssessmentCategory",
    "COMarkEntry",
    "MarkRecord",
    "CourseOutcomeTarget",
    "COSummary",
    "POSummary",
    "Student",
]
