"""Centralized attainment thresholds and magic numbers.

This module contains the target percentages, banding cut-offs and numeric
tolerances used throughout report assembly. Having these in one place
makes tuning easier and documents where each value comes from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass
class AttainmentBandThresholds:
    """Cut-offs on the class percentage for attainment levels."""

    level_3_min_percent: float = 60.0  # >= 60% of the class met the target
    level_2_min_percent: float = 50.0  # >= 50% of the class met the target


@dataclass
class TargetThresholds:
    """Per-student target percentages."""

    default_subject_target: float = 65.0  # Used when a subject has no entry in SUBJECT_TARGETS
    lab_target: float = 75.0  # Fixed for every lab report


@dataclass
class PrecisionThresholds:
    """Display rounding and formula/fallback agreement."""

    display_decimals: int = 2
    agreement_tolerance: float = 0.01  # abs(formula - fallback) must stay below this


# Subject-specific targets for the CO report. Subjects missing here use
# TARGET_THRESHOLDS.default_subject_target.
SUBJECT_TARGETS: Dict[str, float] = {}


def subject_target(subject_code: str) -> float:
    """Target percentage for a subject code, falling back to the default."""
    return SUBJECT_TARGETS.get(subject_code, TARGET_THRESHOLDS.default_subject_target)


# Global instances for easy import
BAND_THRESHOLDS = AttainmentBandThresholds()
TARGET_THRESHOLDS = TargetThresholds()
PRECISION_THRESHOLDS = PrecisionThresholds()
