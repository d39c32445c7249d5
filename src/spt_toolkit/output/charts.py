"""
Module: output.charts

Purpose:
    Chart-ready series as plain dicts ({"labels": [...], "datasets": [...]}).
    Nothing is rendered here; any charting front end can consume the dicts.

Key Functions:
    - co_attainment_chart(): CO attainment vs target for one student
    - historical_chart(): Internal/exam percentage per mark record
    - university_chart(): Current vs predicted CO by year, department or course
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Sequence

from spt_toolkit.common.numbers import round2
from spt_toolkit.core.models import COSummary, MarkRecord
from spt_toolkit.engine.normalizer import record_percentages
from spt_toolkit.importing.history import HistoricalData, predict_next

ChartData = Dict[str, Any]
UniversityView = Literal["year", "department", "course"]

NO_DATA = "No Data"


def _dataset(label: str, data: List[Optional[float]]) -> Dict[str, Any]:
    return {"label": label, "data": data}


def co_attainment_chart(co_summary: Sequence[COSummary]) -> ChartData:
    """Bar series of attainment and target per CO; a single zero bar when empty."""
    if not co_summary:
        return {"labels": [NO_DATA], "datasets": [_dataset("Attainment (%)", [0.0])]}
    return {
        "labels": [s.co_id for s in co_summary],
        "datasets": [
            _dataset("Attainment (%)", [s.avg_attainment for s in co_summary]),
            _dataset("Target (%)", [s.target for s in co_summary]),
        ],
    }


def historical_chart(records: Sequence[MarkRecord]) -> ChartData:
    """Internal and exam percentage per record, labelled by year ("Entry N" when blank)."""
    if not records:
        return {
            "labels": [NO_DATA],
            "datasets": [_dataset("Internal (%)", [0.0]), _dataset("Exam (%)", [0.0])],
        }
    labels = [r.year or f"Entry {i}" for i, r in enumerate(records, start=1)]
    percentages = [record_percentages(r) for r in records]
    return {
        "labels": labels,
        "datasets": [
            _dataset("Internal (%)", [round2(p[0]) for p in percentages]),
            _dataset("Exam (%)", [round2(p[1]) for p in percentages]),
        ],
    }


def university_chart(data: HistoricalData, view: UniversityView = "year") -> ChartData:
    """
    Current and predicted CO per year, department or course.

    The year view appends the following year as an extra label carrying
    only the prediction for the latest year. The department and course
    views pair each current value with its own prediction.

    Raises:
        ValueError: If view is unknown
    """
    if view == "year":
        current = data.co_by_year()
        labels = list(current)
        values: List[Optional[float]] = list(current.values())
        numeric_years = [int(y) for y in labels if str(y).lstrip("-").isdigit()]
        next_label = str(max(numeric_years) + 1) if numeric_years else "N/A"
        predicted_last = predict_next(values[-1]) if values else None
        return {
            "labels": [*labels, next_label],
            "datasets": [
                _dataset("Current CO (%)", [*values, None]),
                _dataset("Predicted CO (%)", [None] * len(values) + [predicted_last]),
            ],
        }

    if view == "department":
        current = data.co_by_department()
    elif view == "course":
        current = data.co_by_course()
    else:
        raise ValueError(f"Unknown view: {view!r}")

    return {
        "labels": list(current),
        "datasets": [
            _dataset("Current CO (%)", list(current.values())),
            _dataset("Predicted CO (%)", [predict_next(v) for v in current.values()]),
        ],
    }
