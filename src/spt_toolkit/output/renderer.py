"""
Module: output.renderer

Purpose:
    Render reports to PDF using ReportLab platypus tables.

Key Functions:
    - render_students_pdf(): "Student Performance Report", one table per department
    - render_semester_pdf(): "Semester CO/PO Attainment Report"

Dependencies:
    - reportlab: PDF generation
    - output.rows: ExportRow

Used By:
    - spt_toolkit.controller: export pipeline
    - spt_toolkit.cli
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from spt_toolkit.common.thresholds import AttainmentParameters
from spt_toolkit.core.models import AssessmentCategory, POSummary
from spt_toolkit.engine.aggregator import (
    ROW_CIA,
    ROW_OVERALL,
    ROW_SEE,
    AttainmentBreakdown,
    average_row,
)
from spt_toolkit.engine.levels import classify
from spt_toolkit.errors import ExportError

from .rows import EXPORT_HEADERS, ExportRow, group_by_department

logger = logging.getLogger(__name__)

STUDENTS_TITLE = "Student Performance Report"
SEMESTER_TITLE = "Semester CO/PO Attainment Report"

HEADER_COLOUR = colors.HexColor("#0d6efd")

# Breakdown rows shown in the semester CO table, in column order
SEMESTER_CO_COLUMNS = (
    (average_row(AssessmentCategory.INTERNAL), "Internal"),
    (average_row(AssessmentCategory.ASSIGNMENT), "Assignment"),
    (average_row(AssessmentCategory.CLASS_TEST), "Class Test"),
    (ROW_CIA, "CIA"),
    (ROW_SEE, "SEE Level"),
    (ROW_OVERALL, "Average"),
)


def _table(data: List[List[object]], col_widths: Optional[Sequence[float]] = None) -> Table:
    styles = getSampleStyleSheet()
    # Wrap long cells so CO text doesn't run off the page
    wrapped = [data[0]] + [
        [Paragraph(escape(str(cell)), styles["BodyText"]) if isinstance(cell, str) and len(cell) > 30 else cell
         for cell in row]
        for row in data[1:]
    ]
    table = Table(wrapped, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOUR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.lightgrey]),
    ]))
    return table


def _build(path: Path, elements: list, title: str, *, pagesize=A4) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = SimpleDocTemplate(str(path), pagesize=pagesize, title=title)
        doc.build(elements)
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e
    return path


def render_students_pdf(rows: Iterable[ExportRow], path: Path) -> Path:
    """
    Render the student performance report.

    Raises:
        ExportError: If there is nothing to export or the PDF can't be written

    Example:
        >>> render_students_pdf(build_export_rows(students, summaries), Path("report.pdf"))
    """
    groups = group_by_department(rows)
    if not groups:
        raise ExportError("No student data available to export")

    styles = getSampleStyleSheet()
    elements: list = [Paragraph(STUDENTS_TITLE, styles["Title"])]
    page_width = landscape(A4)[0] - 72 * 2
    col_widths = [page_width * f for f in (0.12, 0.18, 0.14, 0.1, 0.46)]
    for department, dept_rows in groups.items():
        elements.append(Paragraph(f"Department: {escape(department)}", styles["Heading2"]))
        data: List[List[object]] = [list(EXPORT_HEADERS)]
        data.extend(list(r.as_tuple()) for r in dept_rows)
        elements.append(_table(data, col_widths))
        elements.append(Spacer(1, 12))

    _build(path, elements, STUDENTS_TITLE, pagesize=landscape(A4))
    logger.info(f"Rendered {STUDENTS_TITLE} for {len(groups)} departments to {path}")
    return Path(path)


def _procedure_rows(params: AttainmentParameters) -> List[List[object]]:
    return [
        ["Parameter", "Value"],
        ["Student score target", f"{params.student_score_target:g}% of max"],
        ["Attainment Level 3", f">= {params.level3:g}%"],
        ["Attainment Level 2", f">= {params.level2:g}%"],
        ["Attainment Level 1", f"< {params.level2:g}%"],
        ["Direct attainment", f"{params.x:g} x SEE level + {params.y:g} x CIA"],
        ["Final attainment", f"{params.u:g} x direct + {params.v:g} x indirect"],
        ["Target attainment level", str(params.target_attainment_level)],
    ]


def render_semester_pdf(
    breakdown: AttainmentBreakdown,
    po_summary: Optional[Mapping[str, POSummary]],
    path: Path,
) -> Path:
    """
    Render the semester CO/PO attainment report.

    The report opens with the attainment parameters in use. Each CO row
    shows its level next to the expected target attainment level. Missing
    cells (no data for that tool) are printed as "-".

    Raises:
        ExportError: If the breakdown is empty or the PDF can't be written
    """
    if breakdown.is_empty:
        raise ExportError("No semester results to export")

    styles = getSampleStyleSheet()
    params = breakdown.params
    elements: list = [
        Paragraph(SEMESTER_TITLE, styles["Title"]),
        Paragraph("Attainment Procedure", styles["Heading2"]),
        _table(_procedure_rows(params)),
        Spacer(1, 12),
        Paragraph("CO Attainment", styles["Heading2"]),
    ]
    co_data: List[List[object]] = [[
        "CO", *(label for _, label in SEMESTER_CO_COLUMNS), "Level", "Target Level", "Target Attained",
    ]]
    for co_id in breakdown.co_ids:
        cells = []
        for row, _label in SEMESTER_CO_COLUMNS:
            value = breakdown.value(row, co_id)
            cells.append("-" if value is None else f"{value:.2f}")
        level = classify(breakdown.value(ROW_OVERALL, co_id), params)
        co_data.append([
            co_id, *cells, level, params.target_attainment_level,
            "Yes" if breakdown.target_attained[co_id] else "No",
        ])
    elements.append(_table(co_data))
    elements.append(Spacer(1, 12))

    elements.append(Paragraph("PO Attainment", styles["Heading2"]))
    po_data: List[List[object]] = [["PO", "Attainment", "Target Attained"]]
    for po in (po_summary or {}).values():
        po_data.append([po.po_id, f"{po.attainment:.2f}", "Yes" if po.target_attained else "No"])
    if len(po_data) == 1:
        elements.append(Paragraph("No CO-PO mapping supplied.", styles["BodyText"]))
    else:
        elements.append(_table(po_data))

    _build(path, elements, SEMESTER_TITLE)
    logger.info(f"Rendered {SEMESTER_TITLE} for {len(breakdown.co_ids)} COs to {path}")
    return Path(path)
