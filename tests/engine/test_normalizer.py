"""
Unit Tests for Mark Normalizer

Tests for normalize(), student_average() and format_average().
"""

import math

import pytest

from spt_toolkit.core.models import MarkRecord
from spt_toolkit.engine.normalizer import (
    NOT_AVAILABLE,
    format_average,
    normalize,
    record_percentages,
    student_average,
)


class TestNormalize:
    """Tests for normalize()."""

    def test_normalize_when_valid_then_percentage(self):
        assert normalize(40, 50) == 80.0
        assert normalize("8", "10") == 80.0

    @pytest.mark.parametrize("total", [0, -5, None, "", "abc", float("nan"), float("inf")])
    def test_normalize_when_bad_denominator_then_zero(self, total):
        assert normalize(5, total) == 0.0

    def test_normalize_when_scored_non_numeric_then_zero(self):
        assert normalize("abc", 10) == 0.0
        assert normalize(None, 10) == 0.0

    def test_normalize_when_over_total_then_clamped(self):
        assert normalize(60, 50) == 100.0
        assert normalize(-5, 50) == 0.0

    def test_normalize_when_overflow_then_finite(self):
        result = normalize(1e308, 1e-308)
        assert math.isfinite(result)
        assert 0.0 <= result <= 100.0


class TestStudentAverage:
    """Tests for student_average() and format_average()."""

    def test_student_average_when_single_record_then_mean_of_percentages(self, simple_record):
        assert record_percentages(simple_record) == pytest.approx((80.0, 60.0))
        assert student_average([simple_record]) == 70.0
        assert format_average(student_average([simple_record])) == "70.00"

    def test_student_average_when_many_records_then_mean_over_records(self, simple_record):
        perfect = MarkRecord(internal=50, total_internal=50, exam=50, total_exam=50)
        assert student_average([simple_record, perfect]) == 85.0

    def test_student_average_when_no_records_then_none(self):
        assert student_average([]) is None
        assert format_average(None) == NOT_AVAILABLE

    def test_student_average_when_totals_missing_then_zero_contribution(self):
        record = MarkRecord(internal=40, exam=30)
        assert student_average([record]) == 0.0

    def test_format_average_when_half_cent_then_rounds_up(self):
        assert format_average(70.005) == "70.01"
