"""
Unit Tests for Student Workbook Import

Tests for iter_co_columns(), parse_student_rows() and read_rows().
"""

import types

import pytest
from openpyxl import Workbook

from spt_toolkit.core.models import AssessmentCategory, CourseOutcomeTarget
from spt_toolkit.engine.normalizer import format_average, student_average
from spt_toolkit.errors import MalformedRowError
from spt_toolkit.importing.spreadsheet import (
    import_students,
    iter_co_columns,
    parse_student_row,
    parse_student_rows,
    read_rows,
)

HEADERS = [
    "Student ID", "Name", "Department", "Year",
    "Internal Marks", "Internal Total", "Exam Marks", "Exam Total",
    "CO1 Internal Marks", "CO1 Internal Total", "CO1 Exam Marks", "CO1 Exam Total", "CO1 Target %",
    "CO2 Internal Marks", "CO2 Internal Total", "CO2 Exam Marks", "CO2 Exam Total", "CO2 Target %",
]


def _row(student_id="S1", name="Asha", department="CSE", **overrides):
    row = {
        "student id": student_id,
        "name": name,
        "department": department,
        "year": 2024,
        "internal marks": 40,
        "internal total": 50,
        "exam marks": 30,
        "exam total": 50,
        "co1 internal marks": 8,
        "co1 internal total": 10,
        "co1 exam marks": 35,
        "co1 exam total": 50,
        "co1 target %": 75,
    }
    row.update(overrides)
    return row


@pytest.fixture
def workbook_path(tmp_path):
    """Two sheets; the second has a blank row and a numeric student id."""
    wb = Workbook()
    ws = wb.active
    ws.title = "CSE"
    ws.append(HEADERS)
    ws.append(["S1", "Asha", "CSE", 2024, 40, 50, 30, 50, 8, 10, 35, 50, 75, None, None, None, None, None])
    ws.append(["S2", "Bala", None, 2024, 30, 50, 25, 50, 6, 10, 30, 50, 70, None, None, None, None, None])
    ws2 = wb.create_sheet("ECE")
    ws2.append(HEADERS)
    ws2.append([None] * len(HEADERS))
    ws2.append([101.0, "Chitra", "ECE", 2024, 45, 50, 40, 50, 9, 10, 40, 50, None, 7, 10, 45, 50, 80])
    path = tmp_path / "students.xlsx"
    wb.save(path)
    return path


class TestIterCoColumns:
    """Tests for iter_co_columns()."""

    def test_iter_when_called_then_lazy_generator(self):
        assert isinstance(iter_co_columns(_row()), types.GeneratorType)

    def test_iter_when_next_number_absent_then_stops(self):
        result = list(iter_co_columns(_row()))
        assert result == [("CO1", {
            "internal": 8.0,
            "total_internal": 10.0,
            "exam": 35.0,
            "total_exam": 50.0,
            "target": 75.0,
        })]

    def test_iter_when_gap_in_numbering_then_stops_at_gap(self):
        row = _row(**{"co3 internal marks": 4})
        assert [co for co, _ in iter_co_columns(row)] == ["CO1"]

    def test_iter_when_mixed_case_headers_then_matched(self):
        row = {"CO1  Internal Marks": 3, "Co1 Internal Total": 5}
        (co_id, fields), = iter_co_columns(row)
        assert co_id == "CO1"
        assert fields["total_internal"] == 5.0

    def test_iter_when_called_twice_then_restarts(self):
        row = _row()
        assert list(iter_co_columns(row)) == list(iter_co_columns(row))


class TestParseStudentRows:
    """Tests for parse_student_row() / parse_student_rows()."""

    def test_parse_row_when_complete_then_student(self):
        student = parse_student_row(_row(), row_number=2)

        assert student.student_id == "S1"
        assert student.marks[0].year == "2024"
        assert student.marks[0].co_mapping[0].exam == 35.0
        assert student.course_outcomes == (CourseOutcomeTarget("CO1", 75),)
        assert format_average(student_average(student.marks)) == "70.00"

    def test_parse_row_when_department_missing_then_raises_error(self):
        with pytest.raises(MalformedRowError) as exc:
            parse_student_row(_row(department=None), row_number=7)
        assert exc.value.row_number == 7
        assert exc.value.missing == ("department",)

    def test_parse_rows_when_one_malformed_then_others_imported(self):
        result = parse_student_rows([_row("S1"), _row("S2", department=""), _row("S3")])

        assert [s.student_id for s in result.students] == ["S1", "S3"]
        assert len(result.dropped) == 1
        assert result.dropped[0].row_number == 3
        assert "department" in result.dropped[0].reason

    def test_parse_rows_when_same_student_twice_then_merged(self):
        rows = [_row("S1", year=2023), _row("S1", year=2024, **{"co1 target %": 80})]
        result = parse_student_rows(rows)

        assert len(result.students) == 1
        student = result.students[0]
        assert [m.year for m in student.marks] == ["2023", "2024"]
        assert student.course_outcomes == (CourseOutcomeTarget("CO1", 80),)

    def test_parse_rows_when_blank_co_cells_then_no_entry(self):
        row = _row(**{"co1 internal marks": None, "co1 internal total": None,
                      "co1 exam marks": None, "co1 exam total": None})
        student = parse_student_row(row)
        assert student.marks[0].co_mapping == ()

    def test_parse_rows_when_category_column_then_applied(self):
        student = parse_student_row(_row(category="Assignment", instance=2))
        assert student.marks[0].category is AssessmentCategory.ASSIGNMENT
        assert student.marks[0].instance == 2


class TestReadRows:
    """Tests for read_rows() / import_students()."""

    def test_read_rows_when_two_sheets_then_all_rows(self, workbook_path):
        rows = list(read_rows(workbook_path))

        assert [(r.sheet, r.row_number) for r in rows] == [("CSE", 2), ("CSE", 3), ("ECE", 3)]
        assert rows[0].values["student id"] == "S1"
        assert "co2 target %" in rows[0].values

    def test_import_when_workbook_then_students_and_dropped(self, workbook_path):
        result = import_students(workbook_path)

        assert [s.student_id for s in result.students] == ["S1", "101"]
        assert result.dropped[0].sheet == "CSE"
        assert result.dropped[0].row_number == 3
        chitra = result.students[1]
        assert [e.co_id for e in chitra.marks[0].co_mapping] == ["CO1", "CO2"]
        assert chitra.course_outcomes == (CourseOutcomeTarget("CO2", 80),)

    def test_import_when_missing_file_then_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            import_students(tmp_path / "missing.xlsx")
