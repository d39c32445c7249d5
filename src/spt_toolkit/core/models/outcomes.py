"""
Module: outcomes

Purpose:
    Course/program outcome targets and the derived attainment summaries.
    Summaries are never mutated in place: the engine rebuilds them from
    MarkRecords and targets on every computation.

Key Classes:
    - CourseOutcomeTarget: Stored target for one CO
    - COSummary: Derived attainment for one CO
    - POSummary: Derived attainment for one PO

Dependencies:
    - dataclasses (std)
    - spt_toolkit.common

Used By:
    - engine.aggregator / engine.targets / engine.programs
    - output.rows / output.charts
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from spt_toolkit.common.numbers import coerce_number
from spt_toolkit.common.outcomes import normalise_outcome_id
from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS


@dataclass(frozen=True, slots=True)
class CourseOutcomeTarget:
    """
    Target attainment percentage for one course outcome.

    Attributes:
        co_id: Canonical outcome id like "CO1"
        target: Target percentage in [0, 100]
    """

    co_id: str
    target: float = ATTAINMENT_PARAMETERS.default_target

    def __post_init__(self) -> None:
        """Validate target on construction."""
        if not self.co_id:
            raise ValueError("co_id must not be empty")
        if not (0 <= self.target <= 100):
            raise ValueError(f"target must be 0-100: {self.target}")

    def to_dict(self) -> Dict[str, Any]:
        return {"coId": self.co_id, "target": self.target}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        default_target: float = ATTAINMENT_PARAMETERS.default_target,
    ) -> CourseOutcomeTarget:
        """
        Parse a stored target.

        Unparseable or zero targets fall back to default_target (the form
        posts ``parseFloat(target) || 70``); out-of-range values are clamped.

        Raises:
            ValueError: If the co id is missing
        """
        target = coerce_number(data.get("target"))
        if not target:
            target = default_target
        return cls(
            co_id=normalise_outcome_id(data.get("coId", data.get("co_id"))),
            target=min(max(target, 0.0), 100.0),
        )


@dataclass(frozen=True, slots=True)
class COSummary:
    """
    Derived attainment for one course outcome.

    Attributes:
        co_id: Outcome id
        avg_attainment: Final attainment, 0-100
        target: Target the attainment was compared against
        target_attained: avg_attainment >= target
        level: Attainment level (1-3) of avg_attainment
    """

    co_id: str
    avg_attainment: float
    target: float
    target_attained: bool
    level: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coId": self.co_id,
            "avgAttainment": self.avg_attainment,
            "target": self.target,
            "targetAttained": self.target_attained,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> COSummary:
        """Parse a backend summary; bad numbers read as 0 / default target."""
        attainment = coerce_number(data.get("avgAttainment", data.get("avg_attainment"))) or 0.0
        target = coerce_number(data.get("target"))
        if target is None:
            target = ATTAINMENT_PARAMETERS.default_target
        attained = data.get("targetAttained", data.get("target_attained"))
        level = coerce_number(data.get("level"))
        return cls(
            co_id=normalise_outcome_id(data.get("coId", data.get("co_id"))),
            avg_attainment=attainment,
            target=target,
            target_attained=bool(attained) if attained is not None else attainment >= target,
            level=int(level) if level else 1,
        )


@dataclass(frozen=True, slots=True)
class POSummary:
    """
    Derived attainment for one program outcome.

    Attributes:
        po_id: Outcome id like "PO1"
        attainment: Weighted CO attainment, 0-100
        target: Target percentage
        target_attained: attainment >= target
    """

    po_id: str
    attainment: float
    target: float
    target_attained: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "poId": self.po_id,
            "attainment": self.attainment,
            "target": self.target,
            "targetAttained": self.target_attained,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> POSummary:
        attainment = coerce_number(data.get("attainment")) or 0.0
        target = coerce_number(data.get("target"))
        if target is None:
            target = ATTAINMENT_PARAMETERS.default_target
        attained: Optional[object] = data.get("targetAttained", data.get("target_attained"))
        return cls(
            po_id=normalise_outcome_id(data.get("poId", data.get("po_id")), prefix="PO"),
            attainment=attainment,
            target=target,
            target_attained=bool(attained) if attained is not None else attainment >= target,
        )
