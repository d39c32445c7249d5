"""
Unit Tests for Historical Performance Import

Tests for parse_history_sheet(), load_history() and the forecast helpers.
"""

import pytest
from openpyxl import Workbook

from spt_toolkit.common.thresholds import ForecastThresholds
from spt_toolkit.errors import MalformedRowError
from spt_toolkit.importing.history import (
    CourseSheet,
    HistoricalData,
    StudentMark,
    average_co,
    load_history,
    parse_history_sheet,
    predict_next,
)


def _sheet_rows(year=2022, department="CSE", course="Prog101", marks=((1, "A", 80), (2, "B", 60))):
    return [(year,), (department,), (course,), ("Reg No", "Grade", "Mark"), *marks]


@pytest.fixture
def history_path(tmp_path):
    """Three valid course sheets plus one without a course."""
    wb = Workbook()
    sheets = [
        ("A", _sheet_rows()),
        ("B", _sheet_rows(2023, "CSE", "Prog101", ((1, "A", 90), (2, "A", 90)))),
        ("C", _sheet_rows(2023, "ECE", "Circuits", ((7, "C", 50),))),
        ("Broken", [(2024,), ("CSE",), (None,), ("Reg No", "Grade", "Mark"), (1, "A", 99)]),
    ]
    for index, (title, rows) in enumerate(sheets):
        ws = wb.active if index == 0 else wb.create_sheet()
        ws.title = title
        for row in rows:
            ws.append(list(row))
    path = tmp_path / "history.xlsx"
    wb.save(path)
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Forecast helpers
# ─────────────────────────────────────────────────────────────────────────────

class TestForecast:
    """Tests for average_co() / predict_next()."""

    def test_average_when_students_then_rounded_mean(self):
        students = [StudentMark("1", mark=70), StudentMark("2", mark=71)]
        assert average_co(students) == 70.5

    def test_average_when_no_students_then_zero(self):
        assert average_co([]) == 0.0

    @pytest.mark.parametrize("current, expected", [
        (70, 73.5),
        (80, 84.0),
        (98, 100.0),
        (0, 0.0),
    ])
    def test_predict_when_value_then_growth_capped(self, current, expected):
        assert predict_next(current) == expected

    def test_predict_when_custom_thresholds_then_used(self):
        assert predict_next(50, ForecastThresholds(growth_factor=1.1, ceiling=54)) == 54


# ─────────────────────────────────────────────────────────────────────────────
# Sheet parsing
# ─────────────────────────────────────────────────────────────────────────────

class TestParseHistorySheet:
    """Tests for parse_history_sheet()."""

    def test_parse_when_complete_then_course_sheet(self):
        sheet = parse_history_sheet(_sheet_rows())

        assert (sheet.year, sheet.department, sheet.course) == ("2022", "CSE", "Prog101")
        assert sheet.students == (StudentMark("1", "A", 80.0), StudentMark("2", "B", 60.0))

    def test_parse_when_mark_blank_then_zero(self):
        sheet = parse_history_sheet(_sheet_rows(marks=((5, "F", None), (6,))))
        assert [s.mark for s in sheet.students] == [0.0, 0.0]
        assert sheet.students[1].grade == ""

    def test_parse_when_blank_student_row_then_skipped(self):
        sheet = parse_history_sheet(_sheet_rows(marks=((None, None, None), (1, "A", 75))))
        assert len(sheet.students) == 1

    def test_parse_when_course_missing_then_raises_error(self):
        with pytest.raises(MalformedRowError) as exc:
            parse_history_sheet(_sheet_rows(course=None), sheet="S1")
        assert exc.value.missing == ("course",)
        assert exc.value.row_number == 3

    def test_parse_when_sheet_empty_then_all_missing(self):
        with pytest.raises(MalformedRowError) as exc:
            parse_history_sheet([])
        assert exc.value.missing == ("year", "department", "course")


# ─────────────────────────────────────────────────────────────────────────────
# HistoricalData views
# ─────────────────────────────────────────────────────────────────────────────

class TestHistoricalData:
    """Tests for HistoricalData grouping."""

    def test_views_when_sheets_added_then_grouped(self):
        data = HistoricalData()
        data.add(CourseSheet("2022", "CSE", "Prog101", (StudentMark("1", mark=80), StudentMark("2", mark=60))))
        data.add(CourseSheet("2023", "ECE", "Prog101", (StudentMark("3", mark=90),)))

        assert data.co_by_year() == {"2022": 70.0, "2023": 90.0}
        assert data.co_by_department() == {"CSE": 70.0, "ECE": 90.0}
        assert data.co_by_course() == {"Prog101": pytest.approx(76.67)}

    def test_add_when_same_course_twice_then_replaced(self):
        data = HistoricalData()
        data.add(CourseSheet("2022", "CSE", "Prog101", (StudentMark("1", mark=10),)))
        data.add(CourseSheet("2022", "CSE", "Prog101", (StudentMark("1", mark=50),)))
        assert data.students_for(year="2022") == [StudentMark("1", mark=50)]

    def test_is_empty_when_new_then_true(self):
        assert HistoricalData().is_empty()


class TestLoadHistory:
    """Tests for load_history()."""

    def test_load_when_workbook_then_tree_built(self, history_path):
        data = load_history(history_path)

        assert data.years == ["2022", "2023"]
        assert data.co_by_year() == {"2022": 70.0, "2023": pytest.approx(76.67)}
        assert data.departments == ["CSE", "ECE"]

    def test_load_when_sheet_missing_course_then_skipped(self, history_path, caplog):
        with caplog.at_level("WARNING"):
            data = load_history(history_path)
        assert "2024" not in data.tree
        assert "Broken" in caplog.text

    def test_load_when_missing_file_then_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_history(tmp_path / "nope.xlsx")
