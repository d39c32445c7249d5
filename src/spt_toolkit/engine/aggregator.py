"""
Module: engine.aggregator

Purpose:
    Combine per-assessment percentages into per-CO attainment.

    Pipeline per course outcome:
    1. Normalize each record's internal marks into its CIA tool/instance
       (Internal Assessment 1-3, Assignment 1-3, Class Test 1-2, Seminar,
       Work Project). Tools with no data for a CO are excluded, never zeroed.
    2. Average repeated instances into a tool average.
    3. CIA = mean of the internal, assignment and class-test averages that
       exist.
    4. SEE = mean exam percentage, expressed as a level (1-3).
    5. Direct = x * SEE level + y * CIA percentage.
    6. Indirect = survey value, or per AttainmentParameters.indirect_policy.
    7. Overall = u * direct + v * indirect, clamped to [0, 100].
    8. Target attained = overall >= target.

Key Functions:
    - compute_breakdown(): Full per-tool table (semester report)
    - aggregate(): CO id -> COSummary

Key Classes:
    - AttainmentBreakdown: Row/CO table plus targets and parameters

Dependencies:
    - engine.normalizer: normalize()
    - engine.levels: classify()

Used By:
    - engine.reports
    - output.renderer (semester report)
    - spt_toolkit.controller
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from statistics import fmean
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from spt_toolkit.common.numbers import coerce_number, round2
from spt_toolkit.common.outcomes import normalise_outcome_id, sorted_outcomes
from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters
from spt_toolkit.core.models import (
    AssessmentCategory,
    COSummary,
    CourseOutcomeTarget,
    MarkRecord,
)

from .levels import classify
from .normalizer import normalize

logger = logging.getLogger(__name__)

TargetsLike = Union[Iterable[CourseOutcomeTarget], Mapping[str, float], None]

# Tools with numbered instances get one row per instance plus an average row
_NUMBERED_CATEGORIES = tuple(c for c in AssessmentCategory if c.counts_toward_cia)
_SINGLE_CATEGORIES = tuple(c for c in AssessmentCategory if not c.counts_toward_cia)

ROW_CIA = "cia"
ROW_SEE = "see"
ROW_SEE_PERCENTAGE = "seePercentage"
ROW_DIRECT = "direct"
ROW_INDIRECT = "indirect"
ROW_OVERALL = "overall"


def average_row(category: AssessmentCategory) -> str:
    """Row key of a tool's average ("internalAvg")."""
    if category in _SINGLE_CATEGORIES:
        return category.value
    return f"{category.value}Avg"


def instance_row(category: AssessmentCategory, instance: int) -> str:
    """Row key of one tool instance ("assignment2")."""
    return f"{category.value}{instance}"


@dataclass(frozen=True)
class AttainmentBreakdown:
    """
    Per-tool attainment table for a set of mark records (immutable).

    Attributes:
        co_ids: Course outcomes with any recorded data, natural order
        rows: Row key -> co id -> value. Missing cells mean "no data".
        row_order: Row keys in report order
        row_labels: Row key -> printed label
        targets: Co id -> target used
        target_attained: Co id -> overall >= target
        params: Parameters the table was computed with
    """

    co_ids: Tuple[str, ...]
    rows: Dict[str, Dict[str, float]]
    row_order: Tuple[str, ...]
    row_labels: Dict[str, str]
    targets: Dict[str, float]
    target_attained: Dict[str, bool]
    params: AttainmentParameters = field(default=ATTAINMENT_PARAMETERS)

    @property
    def is_empty(self) -> bool:
        return not self.co_ids

    def value(self, row: str, co_id: str) -> Optional[float]:
        """Cell value, None when the row has no data for the CO."""
        return self.rows.get(row, {}).get(co_id)

    def summaries(self) -> Dict[str, COSummary]:
        """CO id -> COSummary, natural order."""
        result: Dict[str, COSummary] = {}
        for co_id in self.co_ids:
            overall = self.rows[ROW_OVERALL][co_id]
            result[co_id] = COSummary(
                co_id=co_id,
                avg_attainment=overall,
                target=self.targets[co_id],
                target_attained=self.target_attained[co_id],
                level=classify(overall, self.params),
            )
        return result

    def to_dict(self) -> Dict[str, object]:
        """Serialize in the semester-results response shape."""
        return {
            "coAttainment": {
                row: {co_id: self.rows[row][co_id] for co_id in self.co_ids if co_id in self.rows[row]}
                for row in self.row_order
            },
            "targetAttained": dict(self.target_attained),
            "parameters": self.params.to_dict(),
        }


def compute_breakdown(
    records: Sequence[MarkRecord],
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
    *,
    targets: TargetsLike = None,
    indirect: Optional[Mapping[str, float]] = None,
) -> AttainmentBreakdown:
    """
    Build the per-tool attainment table.

    Args:
        records: Mark records (any mix of tools and instances)
        params: Weighting coefficients and thresholds
        targets: CO targets (models or co id -> target); missing COs use
            params.default_target
        indirect: Course-exit survey attainment per CO, percent

    Returns:
        AttainmentBreakdown; empty when no record carries CO data.

    Example:
        >>> b = compute_breakdown([MarkRecord(co_mapping=(
        ...     COMarkEntry("CO1", internal=8, total_internal=10,
        ...                 exam=35, total_exam=50),))])
        >>> b.value("cia", "CO1"), b.value("see", "CO1")
        (80.0, 3.0)
    """
    target_map = _target_map(targets, params)
    survey = _survey_map(indirect)

    # (category, instance) -> co id -> percentages
    tool_data: Dict[Tuple[AssessmentCategory, int], Dict[str, List[float]]] = defaultdict(
        lambda: defaultdict(list)
    )
    see_data: Dict[str, List[float]] = defaultdict(list)
    co_seen: List[str] = []

    for record in records:
        for entry in record.co_mapping:
            recorded = False
            if entry.has_internal:
                tool_data[(record.category, record.instance)][entry.co_id].append(
                    normalize(entry.internal, entry.total_internal)
                )
                recorded = True
            if entry.has_exam:
                see_data[entry.co_id].append(normalize(entry.exam, entry.total_exam))
                recorded = True
            if recorded:
                co_seen.append(entry.co_id)
            else:
                logger.debug(f"{entry.co_id} in {record.year or 'record'} has no marks; skipped")

    co_ids = tuple(sorted_outcomes(co_seen))
    rows: Dict[str, Dict[str, float]] = {}
    row_order: List[str] = []
    labels: Dict[str, str] = {}

    def add_row(key: str, label: str, values: Dict[str, float]) -> None:
        rows[key] = values
        row_order.append(key)
        labels[key] = label

    # Steps 1-2: tool instances and averages
    tool_averages: Dict[AssessmentCategory, Dict[str, float]] = {}
    for category in _NUMBERED_CATEGORIES:
        instances = sorted(inst for (cat, inst) in tool_data if cat is category)
        per_co: Dict[str, List[float]] = defaultdict(list)
        for inst in instances:
            values = {co: fmean(pcts) for co, pcts in tool_data[(category, inst)].items()}
            add_row(instance_row(category, inst), f"{category.label} {inst}", values)
            for co, value in values.items():
                per_co[co].append(value)
        averages = {co: fmean(vals) for co, vals in per_co.items()}
        add_row(average_row(category), f"AVG-{category.label}", averages)
        tool_averages[category] = averages

    for category in _SINGLE_CATEGORIES:
        per_co = defaultdict(list)
        for (cat, _inst), data in tool_data.items():
            if cat is category:
                for co, pcts in data.items():
                    per_co[co].extend(pcts)
        add_row(average_row(category), category.label, {co: fmean(v) for co, v in per_co.items()})

    # Step 3: CIA over the tools that have data
    cia: Dict[str, float] = {}
    for co_id in co_ids:
        parts = [
            tool_averages[cat][co_id]
            for cat in _NUMBERED_CATEGORIES
            if co_id in tool_averages[cat]
        ]
        if parts:
            cia[co_id] = fmean(parts)
        else:
            logger.debug(f"{co_id} has no CIA data; internal term contributes 0")
    add_row(ROW_CIA, "Internal Attainment", cia)

    # Step 4: SEE as a level
    see_pct = {co: fmean(v) for co, v in see_data.items()}
    add_row(ROW_SEE_PERCENTAGE, "External Attainment %", see_pct)
    add_row(ROW_SEE, "External Attainment Level", {co: float(classify(v, params)) for co, v in see_pct.items()})

    # Steps 5-8
    direct: Dict[str, float] = {}
    indirect_row: Dict[str, float] = {}
    overall: Dict[str, float] = {}
    attained: Dict[str, bool] = {}
    for co_id in co_ids:
        see_level = rows[ROW_SEE].get(co_id, 0.0)
        direct[co_id] = params.x * see_level + params.y * cia.get(co_id, 0.0)

        if co_id in survey:
            indirect_row[co_id] = survey[co_id]
            value = params.u * direct[co_id] + params.v * survey[co_id]
        elif params.indirect_policy == "exclude":
            value = direct[co_id]
        else:
            indirect_row[co_id] = 0.0
            value = params.u * direct[co_id]

        overall[co_id] = round2(min(max(value, 0.0), 100.0))
        target_map.setdefault(co_id, params.default_target)
        attained[co_id] = overall[co_id] >= target_map[co_id]

    add_row(ROW_DIRECT, "Direct Attainment", direct)
    add_row(ROW_INDIRECT, "Indirect Attainment", indirect_row)
    add_row(ROW_OVERALL, "Final CO Attainment", overall)

    logger.debug(f"Computed attainment for {len(co_ids)} COs from {len(records)} records")
    return AttainmentBreakdown(
        co_ids=co_ids,
        rows=rows,
        row_order=tuple(row_order),
        row_labels=labels,
        targets={co: target_map[co] for co in co_ids},
        target_attained=attained,
        params=params,
    )


def aggregate(
    records: Sequence[MarkRecord],
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
    *,
    targets: TargetsLike = None,
    indirect: Optional[Mapping[str, float]] = None,
) -> Dict[str, COSummary]:
    """
    Per-CO attainment summary.

    Args:
        records: Mark records for one student (or one cohort)
        params: Weighting coefficients and thresholds
        targets: CO targets; missing COs use params.default_target
        indirect: Survey attainment per CO, percent

    Returns:
        CO id -> COSummary in natural CO order; {} when there are no records.
    """
    if not records:
        return {}
    return compute_breakdown(records, params, targets=targets, indirect=indirect).summaries()


def _target_map(targets: TargetsLike, params: AttainmentParameters) -> Dict[str, float]:
    if targets is None:
        return {}
    if isinstance(targets, Mapping):
        result = {}
        for co_id, value in targets.items():
            target = _percentage(value)
            if target is None:
                logger.debug(f"Invalid target {value!r} for {co_id}; using {params.default_target}")
                target = params.default_target
            result[normalise_outcome_id(co_id)] = target
        return result
    return {t.co_id: t.target for t in targets}


def _percentage(value: object) -> Optional[float]:
    number = coerce_number(value)
    if number is None or not 0 <= number <= 100:
        return None
    return number


def _survey_map(indirect: Optional[Mapping[str, object]]) -> Dict[str, float]:
    survey: Dict[str, float] = {}
    for co_id, raw in (indirect or {}).items():
        value = _percentage(raw)
        if value is None:
            logger.debug(f"Ignoring survey value {raw!r} for {co_id}; treated as no survey")
            continue
        survey[normalise_outcome_id(co_id)] = value
    return survey
