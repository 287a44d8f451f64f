"""
Module: report.aggregation.banding

Purpose:
    Attainment level classification of a group's class percentage.

    Two named policies exist and are deliberately kept apart:
    - WITH_ZERO_FLOOR (subject CO report): >=60 -> 3, >=50 -> 2, >0 -> 1, else 0
    - NO_ZERO_FLOOR (lab LO report):       >=60 -> 3, >=50 -> 2, else 1

Key Functions:
    - attainment_level(): Classify a class percentage
    - legend_entries(): (level, condition) rows for the report legend

Dependencies:
    - common.thresholds: Band cut-offs

Used By:
    - report.aggregation.engine
    - report.emission.formulas: Banding formula
    - report.assembler: Legend rows
"""

from __future__ import annotations

from enum import Enum
from typing import List, Tuple

from attainment_toolkit.common.numbers import format_number
from attainment_toolkit.common.thresholds import BAND_THRESHOLDS, AttainmentBandThresholds


class BandingPolicy(str, Enum):
    """How a class percentage maps to an attainment level."""
    WITH_ZERO_FLOOR = "withZeroFloor"
    NO_ZERO_FLOOR = "noZeroFloor"

    def __str__(self) -> str:
        return self.value

    @property
    def lowest_level(self) -> int:
        return 0 if self == BandingPolicy.WITH_ZERO_FLOOR else 1


def attainment_level(
    class_percent: float,
    policy: BandingPolicy,
    bands: AttainmentBandThresholds = BAND_THRESHOLDS,
) -> int:
    """
    Classify a class percentage into an attainment level.

    Args:
        class_percent: Percentage of students at or above target (0-100)
        policy: Banding policy
        bands: Cut-offs (defaults to 60/50)

    Returns:
        Level 0-3 for WITH_ZERO_FLOOR, 1-3 for NO_ZERO_FLOOR

    Example:
        >>> attainment_level(0, BandingPolicy.WITH_ZERO_FLOOR)
        0
        >>> attainment_level(0, BandingPolicy.NO_ZERO_FLOOR)
        1
    """
    if class_percent >= bands.level_3_min_percent:
        return 3
    if class_percent >= bands.level_2_min_percent:
        return 2
    if policy == BandingPolicy.NO_ZERO_FLOOR:
        return 1
    return 1 if class_percent > 0 else 0


def legend_entries(
    policy: BandingPolicy,
    target: float,
    bands: AttainmentBandThresholds = BAND_THRESHOLDS,
) -> List[Tuple[int, str]]:
    """Legend rows (level, condition), highest level first."""
    t = format_number(target)
    hi = format_number(bands.level_3_min_percent)
    lo = format_number(bands.level_2_min_percent)

    entries = [
        (3, f"If {hi}% and above students have scored above {t}%"),
        (2, f"If {lo}% to {hi}% of students have scored above {t}%"),
    ]
    if policy == BandingPolicy.WITH_ZERO_FLOOR:
        entries.append((1, f"If more than 0% and less than {lo}% of students have scored above {t}%"))
        entries.append((0, f"If no student has scored above {t}%"))
    else:
        entries.append((1, f"If less than {lo}% of students have scored above {t}%"))
    return entries
