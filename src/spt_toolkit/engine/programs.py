"""
Module: engine.programs

Purpose:
    Program outcome (PO) attainment from CO attainment and a CO-PO mapping
    matrix. Each PO is the mapping-strength weighted mean of the COs that
    map to it:

        PO = sum(CO attainment * strength) / sum(strength)

    over COs with a positive strength (1-3) that have a summary.

Key Functions:
    - aggregate_po(): PO id -> POSummary
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from spt_toolkit.common.numbers import coerce_number, round2
from spt_toolkit.common.outcomes import normalise_outcome_id, sorted_outcomes
from spt_toolkit.common.thresholds import ATTAINMENT_PARAMETERS, AttainmentParameters
from spt_toolkit.core.models import COSummary, POSummary

logger = logging.getLogger(__name__)


def aggregate_po(
    co_summary: Mapping[str, COSummary],
    mapping: Mapping[str, Mapping[str, float]],
    *,
    targets: Optional[Mapping[str, float]] = None,
    params: AttainmentParameters = ATTAINMENT_PARAMETERS,
) -> Dict[str, POSummary]:
    """
    Weighted PO attainment.

    Args:
        co_summary: CO id -> COSummary
        mapping: PO id -> {CO id -> strength}
        targets: PO id -> target, default params.default_target
        params: Supplies the default target

    Returns:
        PO id -> POSummary, natural order. A PO with no mapped CO data has
        attainment 0.
    """
    po_targets: Dict[str, float] = {}
    for raw_po, raw_target in (targets or {}).items():
        target = coerce_number(raw_target)
        if target is None or not 0 <= target <= 100:
            logger.debug(f"Invalid target {raw_target!r} for {raw_po}; using {params.default_target}")
            continue
        po_targets[normalise_outcome_id(raw_po, prefix="PO")] = target
    result: Dict[str, POSummary] = {}
    for po_id in sorted_outcomes(normalise_outcome_id(p, prefix="PO") for p in mapping):
        numerator = 0.0
        denominator = 0.0
        for raw_po, strengths in mapping.items():
            if normalise_outcome_id(raw_po, prefix="PO") != po_id:
                continue
            for co_id, raw_strength in strengths.items():
                summary = co_summary.get(normalise_outcome_id(co_id))
                strength = coerce_number(raw_strength)
                if summary is None or strength is None or strength <= 0:
                    continue
                numerator += summary.avg_attainment * strength
                denominator += strength

        if denominator == 0:
            logger.debug(f"{po_id} has no mapped CO data")
        attainment = round2(numerator / denominator) if denominator > 0 else 0.0
        target = po_targets.get(po_id, params.default_target)
        result[po_id] = POSummary(
            po_id=po_id,
            attainment=attainment,
            target=target,
            target_attained=attainment >= target,
        )
    return result
