"""
Unit Tests for Student Reports
"""

import pytest

from spt_toolkit.core.models import COSummary, MarkRecord, Student
from spt_toolkit.engine.reports import (
    build_student_report,
    co_attainment_text,
    three_year_comparison,
)


class TestBuildStudentReport:
    """Tests for build_student_report()."""

    def test_build_when_marks_then_average_and_summary(self, sample_student):
        report = build_student_report(sample_student)

        assert report.average == 70.0
        assert report.average_text == "70.00"
        assert [s.co_id for s in report.co_summary] == ["CO1", "CO2"]
        assert report.co_summary[0].avg_attainment == pytest.approx(58.14)
        # Stored targets are used
        assert report.co_summary[1].target == 60
        assert report.po_summary == ()

    def test_build_when_no_marks_then_empty_summary_and_na(self):
        report = build_student_report(Student("S9", "Ravi", "ECE"))
        assert report.co_summary == ()
        assert report.average is None
        assert report.average_text == "N/A"
        assert report.to_dict()["coSummary"] == []

    def test_build_when_po_mapping_then_po_summary(self, sample_student):
        report = build_student_report(sample_student, po_mapping={"PO1": {"CO1": 1, "CO2": 1}})
        assert len(report.po_summary) == 1
        assert report.po_summary[0].attainment == pytest.approx((58.14 + 36.18) / 2, abs=0.01)

    def test_average_text_when_backend_average_then_preferred(self, sample_student):
        student = Student(
            sample_student.student_id,
            sample_student.name,
            sample_student.department,
            sample_student.marks,
            average="71.50",
        )
        assert build_student_report(student).average_text == "71.50"

    def test_to_dict_when_called_then_identity_and_summaries(self, sample_student):
        data = build_student_report(sample_student).to_dict()
        assert data["student_id"] == "S1"
        assert data["department"] == "CSE"
        assert data["average"] == "70.00"
        assert data["coSummary"][0]["coId"] == "CO1"


class TestCoAttainmentText:
    """Tests for co_attainment_text()."""

    def test_text_when_summaries_then_joined(self):
        summary = [COSummary("CO1", 85, 70, True), COSummary("CO2", 65.5, 70, False)]
        assert co_attainment_text(summary) == "CO1: 85.00% (Level 3), CO2: 65.50% (Level 2)"

    def test_text_when_empty_then_na(self):
        assert co_attainment_text([]) == "N/A"


class TestThreeYearComparison:
    """Tests for three_year_comparison()."""

    @staticmethod
    def _record(year, internal, exam):
        return MarkRecord(year=year, internal=internal, total_internal=100, exam=exam, total_exam=100)

    def test_comparison_when_four_records_then_uses_last_three(self):
        records = [
            self._record("2021", 50, 50),
            self._record("2022", 60, 60),
            self._record("2023", 70, 40),
            self._record("2024", 90, 30),
        ]
        result = three_year_comparison(records)

        assert result.avg_internal == pytest.approx(73.333, abs=0.001)
        assert result.avg_exam == pytest.approx(43.333, abs=0.001)
        assert result.internal_above_avg is True
        assert result.exam_above_avg is False
        assert result.to_dict() == {
            "avgInternal": "73.33",
            "avgExam": "43.33",
            "internalAboveAvg": "Above",
            "examAboveAvg": "Below",
        }

    def test_comparison_when_no_records_then_zero_below(self):
        result = three_year_comparison([])
        assert result.avg_internal == 0.0
        assert result.to_dict()["examAboveAvg"] == "Below"
