"""
Module: engine

Purpose:
    CO/PO attainment engine. Every function here is pure: no I/O, no shared
    state, safe to call concurrently.

Key Functions:
    - normalize(): Mark Normalizer
    - aggregate() / compute_breakdown(): CO Attainment Aggregator
    - classify(): Level Classifier
    - adjust(): Target Adjuster
    - aggregate_po(): PO attainment
    - build_student_report(): Per-student report
"""

from .normalizer import normalize, student_average, format_average, record_percentages, NOT_AVAILABLE
from .levels import classify
from .aggregator import aggregate, compute_breakdown, AttainmentBreakdown
from .targets import adjust, next_target
from .programs import aggregate_po
from .reports import (
    StudentReport,
    YearComparison,
    build_student_report,
    co_attainment_text,
    three_year_comparison,
)

__all__ = [
    "normalize",
    "student_average",
    "format_average",
    "record_percentages",
    "NOT_AVAILABLE",
    "classify",
    "aggregate",
    "compute_breakdown",
    "AttainmentBreakdown",
    "adjust",
    "next_target",
    "aggregate_po",
    "StudentReport",
    "YearComparison",
    "build_student_report",
    "co_attainment_text",
    "three_year_comparison",
]
