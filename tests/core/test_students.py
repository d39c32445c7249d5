"""
Unit Tests for Student and Outcome Models

Tests for Student, CourseOutcomeTarget, COSummary and POSummary.
"""

import pytest

from spt_toolkit.core.models import COSummary, CourseOutcomeTarget, POSummary, Student, filter_students


class TestCourseOutcomeTarget:
    """Tests for CourseOutcomeTarget."""

    def test_init_when_out_of_range_then_raises_error(self):
        with pytest.raises(ValueError, match="0-100"):
            CourseOutcomeTarget("CO1", 120)

    def test_from_dict_when_target_zero_then_default(self):
        assert CourseOutcomeTarget.from_dict({"coId": "CO1", "target": 0}).target == 70

    def test_from_dict_when_target_unparseable_then_default(self):
        assert CourseOutcomeTarget.from_dict({"coId": "CO1", "target": "abc"}).target == 70

    def test_from_dict_when_target_above_100_then_clamped(self):
        assert CourseOutcomeTarget.from_dict({"coId": "co2", "target": 140}) == CourseOutcomeTarget("CO2", 100)


class TestSummaries:
    """Tests for COSummary and POSummary parsing."""

    def test_co_summary_from_dict_when_backend_shape_then_parses(self):
        summary = COSummary.from_dict(
            {"coId": "CO1", "avgAttainment": 82.5, "target": 75, "targetAttained": True}
        )
        assert summary == COSummary("CO1", 82.5, 75, True, 1)

    def test_co_summary_from_dict_when_attained_missing_then_derived(self):
        summary = COSummary.from_dict({"coId": "CO1", "avgAttainment": 60})
        assert summary.target == 70
        assert summary.target_attained is False

    def test_co_summary_to_dict_when_called_then_camel_case(self):
        assert COSummary("CO1", 85.0, 70, True, 3).to_dict() == {
            "coId": "CO1",
            "avgAttainment": 85.0,
            "target": 70,
            "targetAttained": True,
            "level": 3,
        }

    def test_po_summary_from_dict_when_bare_number_then_po_prefix(self):
        summary = POSummary.from_dict({"poId": 2, "attainment": 71})
        assert summary.po_id == "PO2"
        assert summary.target_attained is True


class TestStudent:
    """Tests for Student."""

    def test_init_when_blank_id_then_raises_error(self):
        with pytest.raises(ValueError, match="student_id"):
            Student(student_id="  ")

    def test_target_for_when_missing_then_default(self, sample_student):
        assert sample_student.target_for("CO2") == 60
        assert sample_student.target_for("CO7") == 70

    def test_from_dict_when_backend_keys_then_parses(self, backend_student_payload):
        student = Student.from_dict(backend_student_payload)
        assert student.student_id == "S1"
        assert student.average == "70.00"
        assert len(student.marks) == 1
        assert student.marks[0].co_mapping[0].total_exam == 50
        assert student.course_outcomes == (CourseOutcomeTarget("CO1", 70),)

    def test_from_dict_when_camel_case_keys_then_parses(self, sample_student):
        data = sample_student.to_dict()
        assert data["studentId"] == "S1"
        student = Student.from_dict(data)
        assert student.marks == sample_student.marks
        assert student.course_outcomes == sample_student.course_outcomes

    def test_from_dict_when_malformed_target_then_skipped(self):
        student = Student.from_dict({
            "student_id": "S2",
            "CourseOutcomes": [{"target": 80}, {"coId": "CO1", "target": 80}],
        })
        assert student.course_outcomes == (CourseOutcomeTarget("CO1", 80),)


class TestFilterStudents:
    """Tests for filter_students()."""

    @pytest.fixture
    def roster(self):
        return [
            Student("S1", "Asha Rao", "CSE"),
            Student("S2", "Ben Ortiz", "ECE"),
            Student("S3", "Chitra Das", "cse-ai"),
        ]

    def test_filter_when_no_criteria_then_all_in_order(self, roster):
        assert filter_students(roster) == roster

    def test_filter_when_department_case_differs_then_substring_match(self, roster):
        assert [s.student_id for s in filter_students(roster, department="cs")] == ["S1", "S3"]

    def test_filter_when_name_fragment_then_matched(self, roster):
        assert [s.student_id for s in filter_students(roster, name="ORT")] == ["S2"]

    def test_filter_when_several_criteria_then_all_must_match(self, roster):
        assert [s.student_id for s in filter_students(roster, student_id="s", department="ai")] == ["S3"]
        assert filter_students(roster, name="asha", department="ece") == []

    def test_filter_when_blank_criterion_then_ignored(self, roster):
        assert filter_students(roster, student_id="  ", name="") == roster
