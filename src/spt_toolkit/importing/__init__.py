"""
Importing Package

Workbook importers: header-keyed student sheets and historical university
performance sheets.
"""

from .spreadsheet import (
    DroppedRow,
    ImportResult,
    SheetRow,
    import_students,
    iter_co_columns,
    parse_student_row,
    parse_student_rows,
    read_rows,
)
from .history import (
    CourseSheet,
    HistoricalData,
    StudentMark,
    average_co,
    load_history,
    parse_history_sheet,
    predict_next,
)

__all__ = [
    "DroppedRow",
    "ImportResult",
    "SheetRow",
    "import_students",
    "iter_co_columns",
    "parse_student_row",
    "parse_student_rows",
    "read_rows",
    "CourseSheet",
    "HistoricalData",
    "StudentMark",
    "average_co",
    "load_history",
    "parse_history_sheet",
    "predict_next",
]
