"""
Module: output.excel

Purpose:
    Write export rows to an Excel workbook, one sheet per department.

Key Functions:
    - write_excel(): Rows -> .xlsx file
    - sheet_title(): Department -> valid, unique sheet title

Dependencies:
    - openpyxl: Workbook writing
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Set

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from spt_toolkit.errors import ExportError

from .rows import EXPORT_HEADERS, ExportRow, group_by_department

logger = logging.getLogger(__name__)

MAX_SHEET_TITLE = 31
_INVALID_TITLE_CHARS = re.compile(r"[\\/*?:\[\]]")


def sheet_title(department: str, used: Set[str]) -> str:
    """
    Sheet title for a department: invalid characters replaced, cut to 31
    characters, and suffixed when it collides with an earlier title.
    """
    base = _INVALID_TITLE_CHARS.sub("_", department).strip() or "Unassigned"
    title = base[:MAX_SHEET_TITLE]
    n = 2
    while title.lower() in used:
        suffix = f" ({n})"
        title = base[:MAX_SHEET_TITLE - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def write_excel(rows: Iterable[ExportRow], path: Path) -> Path:
    """
    Write rows grouped by department.

    Raises:
        ExportError: If there is nothing to export or the file can't be saved
    """
    groups = group_by_department(rows)
    if not groups:
        raise ExportError("No student data available to export")

    path = Path(path)
    workbook = Workbook()
    workbook.remove(workbook.active)
    used: Set[str] = set()
    for department, dept_rows in groups.items():
        sheet = workbook.create_sheet(title=sheet_title(department, used))
        sheet.append(list(EXPORT_HEADERS))
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for row in dept_rows:
            sheet.append(list(row.as_tuple()))
        for idx, header in enumerate(EXPORT_HEADERS, start=1):
            width = max(len(header), *(len(str(v)) for v in (r.as_tuple()[idx - 1] for r in dept_rows)))
            sheet.column_dimensions[get_column_letter(idx)].width = min(width + 2, 80)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(str(path))
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e

    logger.info(f"Exported {sum(len(r) for r in groups.values())} students to {path}")
    return path
