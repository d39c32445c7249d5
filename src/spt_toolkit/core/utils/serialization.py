"""
Serialization Utilities

JSON load/save helpers for student files, CO-PO mapping matrices and
survey (indirect attainment) tables used by the command line tools.

Student files may be a bare list of backend records or an object with a
``students`` list. Invalid records are skipped with a warning so one bad
entry does not hide the rest of the cohort.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from spt_toolkit.common.numbers import coerce_number
from spt_toolkit.common.outcomes import normalise_outcome_id

from ..models.students import Student
from ..schemas.validator import ValidationError, validate_student

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Students
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_students(payload: Any) -> List[Student]:
    """
    Build Student models from decoded JSON.

    Args:
        payload: List of student records, or {"students": [...]}

    Returns:
        Valid students in input order
    """
    if isinstance(payload, dict):
        payload = payload.get("students", [])
    if not isinstance(payload, list):
        logger.warning(f"Expected a list of students, got {type(payload).__name__}")
        return []

    students = []
    for raw in payload:
        try:
            validate_student(raw)
            students.append(Student.from_dict(raw))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Invalid student data skipped: {e}")
    return students


def load_students_json(path: Path) -> List[Student]:
    """
    Load students from a JSON file.

    Raises:
        FileNotFoundError: If path doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    students = deserialize_students(payload)
    logger.info(f"Loaded {len(students)} students from {path}")
    return students


def save_students_json(students: List[Student], path: Path) -> None:
    """Write students in the dashboard's POST shape."""
    save_json([s.to_dict() for s in students], path)


def save_json(data: Any, path: Path) -> None:
    """Write data as indented UTF-8 JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


# ─────────────────────────────────────────────────────────────────────────────
# Mapping Tables
# ─────────────────────────────────────────────────────────────────────────────

def parse_po_mapping(payload: Any) -> Dict[str, Dict[str, float]]:
    """
    Parse a CO-PO mapping matrix {"PO1": {"CO1": 3, "CO2": 2}, ...}.

    Non-numeric or non-positive strengths are dropped.
    """
    mapping: Dict[str, Dict[str, float]] = {}
    if not isinstance(payload, dict):
        return mapping
    for po_id, row in payload.items():
        if not isinstance(row, dict):
            continue
        strengths = {}
        for co_id, raw in row.items():
            value = coerce_number(raw)
            if value is not None and value > 0:
                strengths[normalise_outcome_id(co_id)] = value
        mapping[normalise_outcome_id(po_id, prefix="PO")] = strengths
    return mapping


def parse_indirect(payload: Any) -> Dict[str, float]:
    """Parse survey attainment {"CO1": 80, ...}; unparseable values are dropped."""
    values: Dict[str, float] = {}
    if not isinstance(payload, dict):
        return values
    for co_id, raw in payload.items():
        value = coerce_number(raw)
        if value is not None:
            values[normalise_outcome_id(co_id)] = value
    return values


def load_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
