"""
Module: controller

Purpose:
    Orchestrate the toolkit pipelines.
    Local:   Students -> Engine -> Reports -> Excel/PDF
    Remote:  Backend -> Fetch CO summaries -> Excel/PDF
    Update:  PUT marks -> GET CO/PO -> Adjust targets -> PUT targets

Key Functions:
    - compute_reports(): Local attainment for many students
    - export_students(): Rows -> Excel or PDF file
    - export_local(): Students -> computed summaries -> file
    - export_remote(): Backend students + summaries -> file
    - update_marks_and_targets(): Marks update with automatic target adjustment
    - default_output_path(): File name under the configured output directory

Key Classes:
    - ExportResult: Outcome of an export
    - UpdateResult: Outcome of a marks update

Used By:
    - spt_toolkit.cli
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Literal, Mapping, Optional, Sequence

from spt_toolkit.client.api import ApiClient
from spt_toolkit.client.fetcher import fetch_co_summaries
from spt_toolkit.common.thresholds import (
    ATTAINMENT_PARAMETERS,
    TARGET_THRESHOLDS,
    AttainmentParameters,
    TargetAdjustmentThresholds,
)
from spt_toolkit.config import ToolkitConfig
from spt_toolkit.core.models import COSummary, CourseOutcomeTarget, MarkRecord, Student
from spt_toolkit.engine.reports import StudentReport, build_student_report
from spt_toolkit.engine.targets import adjust
from spt_toolkit.errors import ExportError
from spt_toolkit.output.excel import write_excel
from spt_toolkit.output.renderer import render_students_pdf
from spt_toolkit.output.rows import build_export_rows

logger = logging.getLogger(__name__)

ExportFormat = Literal["excel", "pdf"]
EXPORT_FORMATS = ("excel", "pdf")
DEFAULT_EXPORT_NAMES = {"excel": "StudentPerformance.xlsx", "pdf": "StudentPerformance.pdf"}
SEMESTER_REPORT_NAME = "SemesterCoPoReport.pdf"


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of an export (immutable).

    Attributes:
        path: File written
        student_count: Rows exported
        missing_summaries: Students exported with "N/A" CO attainment
        elapsed: Seconds taken
    """

    path: Path
    student_count: int
    missing_summaries: tuple[str, ...]
    elapsed: float


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of update_marks_and_targets()."""

    student_id: str
    co_summary: Dict[str, COSummary]
    targets: tuple[CourseOutcomeTarget, ...]
    changed: tuple[str, ...]


def compute_reports(
    students: Sequence[Student],
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
    *,
    po_mapping: Optional[Mapping[str, Mapping[str, float]]] = None,
    indirect: Optional[Mapping[str, float]] = None,
) -> List[StudentReport]:
    """Per-student reports computed locally."""
    reports = [
        build_student_report(s, params, po_mapping=po_mapping, indirect=indirect)
        for s in students
    ]
    logger.info(f"Computed attainment for {len(reports)} students")
    return reports


def default_output_path(fmt: ExportFormat, config: ToolkitConfig) -> Path:
    """Where an export goes when no path is given."""
    return Path(config.output_dir) / DEFAULT_EXPORT_NAMES[fmt]


def export_students(
    students: Sequence[Student],
    summaries: Mapping[str, Sequence[COSummary]],
    fmt: ExportFormat,
    path: Path,
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
) -> ExportResult:
    """
    Write students and their CO summaries to Excel or PDF.

    Raises:
        ExportError: No students, unknown format, or write failure
    """
    start = time.perf_counter()
    if not students:
        raise ExportError("No student data available to export")
    if fmt not in EXPORT_FORMATS:
        raise ExportError(f"Unknown export format: {fmt!r}")

    rows = build_export_rows(students, summaries, params)
    path = Path(path)
    if fmt == "excel":
        write_excel(rows, path)
    else:
        render_students_pdf(rows, path)

    missing = tuple(s.student_id for s in students if not summaries.get(s.student_id))
    if missing:
        logger.warning(f"{len(missing)} students exported without CO data")
    return ExportResult(path, len(rows), missing, time.perf_counter() - start)


def export_local(
    students: Sequence[Student],
    fmt: ExportFormat,
    path: Path,
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
) -> ExportResult:
    """Compute summaries with the engine, then export."""
    reports = compute_reports(students, params)
    summaries = {r.student.student_id: r.co_summary for r in reports}
    return export_students(students, summaries, fmt, path, params)


def export_remote(
    client: ApiClient,
    fmt: ExportFormat,
    path: Path,
    config: ToolkitConfig,
) -> ExportResult:
    """
    Fetch students and backend CO summaries, then export.

    Raises:
        SessionExpiredError: Session rejected during the fetch
        UpstreamError: Student list could not be fetched
    """
    students = client.list_students()
    fetched = fetch_co_summaries(
        client,
        [s.student_id for s in students],
        max_workers=config.max_workers,
        throttle=config.throttle,
    )
    summaries = {sid: list(co.values()) for sid, co in fetched.items()}
    return export_students(students, summaries, fmt, path, config.attainment)


def update_marks_and_targets(
    client: ApiClient,
    student: Student,
    marks: Sequence[MarkRecord],
    thresholds: TargetAdjustmentThresholds = TARGET_THRESHOLDS,
) -> UpdateResult:
    """
    Store new marks, then raise any CO target the student now beats.

    Raises:
        SessionExpiredError / UpstreamError: From the backend
    """
    client.update_marks(student.student_id, marks)
    co_summary, _po = client.get_co_po(student.student_id)
    targets = adjust(student.course_outcomes, co_summary, thresholds)
    changed = tuple(
        new.co_id for old, new in zip(student.course_outcomes, targets) if new.target != old.target
    )
    client.update_targets(student.student_id, targets)
    logger.info(f"Updated marks for {student.student_id}; {len(changed)} targets raised")
    return UpdateResult(student.student_id, co_summary, tuple(targets), changed)
