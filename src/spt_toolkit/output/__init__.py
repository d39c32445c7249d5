"""
Output Package

Export rows, Excel/PDF writers and chart-ready series.
"""

from .rows import EXPORT_HEADERS, ExportRow, build_export_rows, group_by_department
from .excel import write_excel
from .renderer import render_semester_pdf, render_students_pdf
from .charts import co_attainment_chart, historical_chart, university_chart

__all__ = [
    "EXPORT_HEADERS",
    "ExportRow",
    "build_export_rows",
    "group_by_department",
    "write_excel",
    "render_semester_pdf",
    "render_students_pdf",
    "co_attainment_chart",
    "historical_chart",
    "university_chart",
]
