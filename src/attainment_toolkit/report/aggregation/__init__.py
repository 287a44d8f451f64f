"""
Module: report.aggregation

Purpose:
    Aggregation of sparse per-student marks into group figures and
    attainment levels.

Key Functions:
    - aggregate(): One aggregation pass per report run
    - attainment_level(): Banding of a class percentage

Key Classes:
    - BandingPolicy: WITH_ZERO_FLOOR / NO_ZERO_FLOOR
    - AggregationResult, GroupStatistics, StudentGroupResult
"""

from .banding import BandingPolicy, attainment_level, legend_entries
from .engine import (
    AggregationResult,
    GroupStatistics,
    StudentGroupResult,
    aggregate,
    attempted_only_percent,
    mean,
    obtained,
    percent,
    possible,
)

__all__ = [
    "BandingPolicy",
    "attainment_level",
    "legend_entries",
    "AggregationResult",
    "GroupStatistics",
    "StudentGroupResult",
    "aggregate",
    "attempted_only_percent",
    "mean",
    "obtained",
    "percent",
    "possible",
]
