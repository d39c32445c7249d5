"""Centralized attainment coefficients and thresholds.

This module contains the weighting coefficients, level thresholds and
default targets used by the attainment engine. Having these in one place
keeps the engine free of magic numbers and lets callers pass an adjusted
copy (``dataclasses.replace``) without touching the process-wide defaults.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal


IndirectPolicy = Literal["zero", "exclude"]

_WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class AttainmentParameters:
    """Coefficients for CO attainment (read-only at runtime)."""

    # Direct attainment = x * external level + y * internal attainment
    x: float = 0.2
    y: float = 0.8

    # Final attainment = u * direct + v * indirect
    u: float = 0.9
    v: float = 0.1

    # Level thresholds (inclusive lower bounds, percent)
    level2: float = 60.0
    level3: float = 70.0

    # Student score considered "attained" for an assessment, percent of max
    student_score_target: float = 66.0
    target_attainment_level: int = 2  # Level every CO is expected to reach

    default_target: float = 70.0  # Used when a CO has no stored target
    indirect_policy: IndirectPolicy = "zero"  # "exclude" drops the v-term when no survey data

    def __post_init__(self) -> None:
        """Validate coefficients on construction."""
        for name in ("x", "y", "u", "v", "level2", "level3", "student_score_target", "default_target"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative number: {value!r}")
        if abs(self.x + self.y - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"x + y must equal 1: {self.x} + {self.y}")
        if abs(self.u + self.v - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"u + v must equal 1: {self.u} + {self.v}")
        if self.level2 > self.level3:
            raise ValueError(f"level2 must not exceed level3: {self.level2} > {self.level3}")
        if self.level3 > 100:
            raise ValueError(f"level3 must be a percentage: {self.level3}")
        if self.default_target > 100:
            raise ValueError(f"default_target must be a percentage: {self.default_target}")
        if self.student_score_target > 100:
            raise ValueError(f"student_score_target must be a percentage: {self.student_score_target}")
        if self.target_attainment_level not in (1, 2, 3):
            raise ValueError(f"target_attainment_level must be 1-3: {self.target_attainment_level}")
        if self.indirect_policy not in ("zero", "exclude"):
            raise ValueError(f"Invalid indirect policy: {self.indirect_policy!r}")

    def to_dict(self) -> dict:
        """Parameter block in the shape the semester report prints."""
        return {
            "x": self.x,
            "y": self.y,
            "u": self.u,
            "v": self.v,
            "levelThresholds": {"level2": self.level2, "level3": self.level3},
            "studentScoreTarget": self.student_score_target,
            "targetAttainmentLevel": self.target_attainment_level,
        }


@dataclass(frozen=True)
class TargetAdjustmentThresholds:
    """Thresholds for the next-period target rule."""

    overshoot_margin: float = 10.0  # Attainment must beat target by more than this
    step: float = 5.0  # Raise applied when it does
    ceiling: float = 100.0


@dataclass(frozen=True)
class ForecastThresholds:
    """Growth assumption for the university performance forecast."""

    growth_factor: float = 1.05  # Simple 5% growth
    ceiling: float = 100.0


# Global instances for easy import
ATTAINMENT_PARAMETERS = AttainmentParameters()
TARGET_THRESHOLDS = TargetAdjustmentThresholds()
FORECAST_THRESHOLDS = ForecastThresholds()
