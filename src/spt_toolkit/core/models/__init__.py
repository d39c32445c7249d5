"""
Core Models Package

Immutable data models shared by the engine, importers, exporters and the
REST client.

All models in this package are frozen dataclasses. Derived values
(summaries, averages) are always recomputed from marks and targets, never
edited in place.
"""

from .marks import AssessmentCategory, COMarkEntry, MarkRecord
from .outcomes import CourseOutcomeTarget, COSummary, POSummary
from .students import Student, filter_students

__all__ = [
    "AssessmentCategory",
    "COMarkEntry",
    "MarkRecord",
    "CourseOutcomeTarget",
    "COSummary",
    "POSummary",
    "Student",
    "filter_students",
]
