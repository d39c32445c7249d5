"""
Module: common.outcomes

Purpose:
    Helpers for course/program outcome identifiers. Spreadsheets and the
    backend spell them inconsistently ("co1", "CO 1", "Co1"); everything in
    the engine uses the canonical upper-case form and natural ordering
    (CO2 before CO10).

Key Functions:
    - normalise_outcome_id(): Canonical "CO1"/"PO3" form
    - outcome_number(): Trailing number of an identifier
    - outcome_sort_key(): Natural sort key
    - sorted_outcomes(): Sort identifiers naturally

Used By:
    - spt_toolkit.core.models
    - spt_toolkit.engine.aggregator
    - spt_toolkit.engine.programs
    - spt_toolkit.importing.spreadsheet
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple


__all__ = [
    "normalise_outcome_id",
    "outcome_number",
    "outcome_sort_key",
    "sorted_outcomes",
]


_OUTCOME_RE = re.compile(r"^\s*([A-Za-z]+)\s*[-_ ]?\s*(\d+)\s*$")


def normalise_outcome_id(value: Optional[object], prefix: str = "CO") -> str:
    """
    Normalize an outcome identifier to "CO1" form.

    Args:
        value: Raw identifier (e.g. "co1", "CO 1", "po-3", or a bare number).
        prefix: Prefix used when value is a bare number.

    Returns:
        Canonical identifier, or "" if value is empty.

    Example:
        >>> normalise_outcome_id("co 2")
        'CO2'
        >>> normalise_outcome_id(3, prefix="PO")
        'PO3'
    """
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    if text.isdigit():
        return f"{prefix.upper()}{int(text)}"
    match = _OUTCOME_RE.match(text)
    if not match:
        return text.upper()
    return f"{match.group(1).upper()}{int(match.group(2))}"


def outcome_number(outcome_id: str) -> Optional[int]:
    """Trailing number of an identifier ("CO12" -> 12), None if there is none."""
    match = _OUTCOME_RE.match(outcome_id or "")
    return int(match.group(2)) if match else None


def outcome_sort_key(outcome_id: str) -> Tuple[str, int, str]:
    """Natural sort key: prefix, then number, then raw text."""
    match = _OUTCOME_RE.match(outcome_id or "")
    if not match:
        return (outcome_id or "", 0, outcome_id or "")
    return (match.group(1).upper(), int(match.group(2)), outcome_id)


def sorted_outcomes(outcome_ids: Iterable[str]) -> List[str]:
    """Return unique identifiers in natural order."""
    return sorted(set(outcome_ids), key=outcome_sort_key)
