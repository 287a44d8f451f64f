"""Shared constants used across the report pipeline."""

from .thresholds import (
    BAND_THRESHOLDS,
    PRECISION_THRESHOLDS,
    SUBJECT_TARGETS,
    TARGET_THRESHOLDS,
    subject_target,
)
from .numbers import format_number, formula_number, round_display, safe_percent

__all__ = [
    "BAND_THRESHOLDS",
    "PRECISION_THRESHOLDS",
    "SUBJECT_TARGETS",
    "TARGET_THRESHOLDS",
    "subject_target",
    "format_number",
    "formula_number",
    "round_display",
    "safe_percent",
]
