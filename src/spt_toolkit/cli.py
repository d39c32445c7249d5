"""
Module: cli

Purpose:
    Command line entry point (``spt-toolkit`` / ``python -m spt_toolkit``).

Commands:
    compute STUDENTS_JSON            Print per-student attainment reports
    semester STUDENTS_JSON [-o PDF]  Cohort CO/PO breakdown report
    import XLSX                      Parse a student workbook
    history XLSX                     University performance chart series
    export STUDENTS_JSON -f FMT      Local export to Excel or PDF
    fetch --token TOKEN -f FMT       Remote fetch, then export

    compute and export accept --student-id/--name/--department filters.
    Without -o, files are written under the configured output_dir.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from spt_toolkit import __version__
from spt_toolkit.client.api import ApiClient
from spt_toolkit.client.session import SessionContext
from spt_toolkit.config import ToolkitConfig, load_config
from spt_toolkit.controller import (
    EXPORT_FORMATS,
    SEMESTER_REPORT_NAME,
    compute_reports,
    default_output_path,
    export_local,
    export_remote,
)
from spt_toolkit.core.models import Student, filter_students
from spt_toolkit.core.utils.serialization import (
    load_json,
    load_students_json,
    parse_indirect,
    parse_po_mapping,
    save_json,
)
from spt_toolkit.engine.aggregator import compute_breakdown
from spt_toolkit.engine.programs import aggregate_po
from spt_toolkit.errors import SptError
from spt_toolkit.importing.history import load_history
from spt_toolkit.importing.spreadsheet import import_students
from spt_toolkit.output.charts import university_chart
from spt_toolkit.output.renderer import render_semester_pdf

logger = logging.getLogger(__name__)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2))


def _load_mapping(path: Optional[Path]):
    return parse_po_mapping(load_json(path)) if path else None


def _load_indirect(path: Optional[Path]):
    return parse_indirect(load_json(path)) if path else None


def _select_students(args: argparse.Namespace) -> List[Student]:
    students = load_students_json(args.students)
    selected = filter_students(
        students, student_id=args.student_id, name=args.name, department=args.department
    )
    if len(selected) != len(students):
        logger.info(f"Filter matched {len(selected)} of {len(students)} students")
    return selected


def _add_filter_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--student-id", default="", help="Keep students whose id contains this text")
    p.add_argument("--name", default="", help="Keep students whose name contains this text")
    p.add_argument("--department", default="", help="Keep students whose department contains this text")


def cmd_compute(args: argparse.Namespace, config: ToolkitConfig) -> int:
    students = _select_students(args)
    reports = compute_reports(
        students,
        config.attainment,
        po_mapping=_load_mapping(args.po_mapping),
        indirect=_load_indirect(args.indirect),
    )
    _print_json([r.to_dict() for r in reports])
    return 0


def cmd_semester(args: argparse.Namespace, config: ToolkitConfig) -> int:
    students = load_students_json(args.students)
    records = [record for s in students for record in s.marks]
    breakdown = compute_breakdown(records, config.attainment, indirect=_load_indirect(args.indirect))
    mapping = _load_mapping(args.po_mapping)
    po_summary = aggregate_po(breakdown.summaries(), mapping, params=config.attainment) if mapping else {}
    output = args.output or Path(config.output_dir) / SEMESTER_REPORT_NAME
    render_semester_pdf(breakdown, po_summary, output)
    result = breakdown.to_dict()
    result["poAttainment"] = [p.to_dict() for p in po_summary.values()]
    _print_json(result)
    return 0


def cmd_import(args: argparse.Namespace, config: ToolkitConfig) -> int:
    result = import_students(args.workbook)
    if args.output:
        save_json([s.to_dict() for s in result.students], args.output)
        logger.info(f"Wrote {len(result.students)} students to {args.output}")
    _print_json(result.to_dict())
    return 0 if result.students or not result.dropped else 1


def cmd_history(args: argparse.Namespace, config: ToolkitConfig) -> int:
    data = load_history(args.workbook)
    _print_json(university_chart(data, args.view))
    return 0


def cmd_export(args: argparse.Namespace, config: ToolkitConfig) -> int:
    students = _select_students(args)
    output = args.output or default_output_path(args.format, config)
    result = export_local(students, args.format, output, config.attainment)
    logger.info(f"Exported {result.student_count} students to {result.path} in {result.elapsed:.2f}s")
    return 0


def cmd_fetch(args: argparse.Namespace, config: ToolkitConfig) -> int:
    session = SessionContext(args.api_url or config.api_url, args.token)
    client = ApiClient(session, timeout=config.timeout, retry=config.retry_policy)
    output = args.output or default_output_path(args.format, config)
    result = export_remote(client, args.format, output, config)
    logger.info(f"Exported {result.student_count} students to {result.path} in {result.elapsed:.2f}s")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spt-toolkit",
        description="Student performance CO/PO attainment toolkit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument(
        "--indirect-policy",
        choices=("zero", "exclude"),
        help="How COs without survey data are treated (default from config)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compute", help="Print per-student attainment reports")
    p.add_argument("students", type=Path, help="Students JSON file")
    p.add_argument("--po-mapping", type=Path, help="CO-PO mapping JSON {PO: {CO: strength}}")
    p.add_argument("--indirect", type=Path, help="Indirect survey JSON {CO: percent}")
    _add_filter_arguments(p)
    p.set_defaults(func=cmd_compute)

    p = sub.add_parser("semester", help="Cohort CO/PO breakdown report (PDF)")
    p.add_argument("students", type=Path, help="Students JSON file")
    p.add_argument("-o", "--output", type=Path, help="PDF path (default: output_dir/SemesterCoPoReport.pdf)")
    p.add_argument("--po-mapping", type=Path, help="CO-PO mapping JSON")
    p.add_argument("--indirect", type=Path, help="Indirect survey JSON")
    p.set_defaults(func=cmd_semester)

    p = sub.add_parser("import", help="Parse a student workbook")
    p.add_argument("workbook", type=Path, help="Excel workbook")
    p.add_argument("-o", "--output", type=Path, help="Write imported students as JSON")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("history", help="University performance chart series")
    p.add_argument("workbook", type=Path, help="Historical Excel workbook")
    p.add_argument("--view", choices=("year", "department", "course"), default="year")
    p.set_defaults(func=cmd_history)

    p = sub.add_parser("export", help="Export locally computed attainment")
    p.add_argument("students", type=Path, help="Students JSON file")
    p.add_argument("-f", "--format", choices=EXPORT_FORMATS, default="excel")
    p.add_argument("-o", "--output", type=Path, help="Output file (default: under output_dir)")
    _add_filter_arguments(p)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("fetch", help="Fetch students from the backend and export")
    p.add_argument("--token", required=True, help="Bearer token")
    p.add_argument("--api-url", help="Backend URL (overrides config)")
    p.add_argument("-f", "--format", choices=EXPORT_FORMATS, default="excel")
    p.add_argument("-o", "--output", type=Path, help="Output file (default: under output_dir)")
    p.set_defaults(func=cmd_fetch)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        config = load_config(args.config)
        if args.indirect_policy:
            config = replace(config, attainment=replace(config.attainment, indirect_policy=args.indirect_policy))
        return args.func(args, config)
    except (SptError, FileNotFoundError, json.JSONDecodeError) as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
