"""Number formatting and rounding shared by models and report cells."""

from __future__ import annotations

from .thresholds import PRECISION_THRESHOLDS


def format_number(value: float) -> str:
    """Render 10.0 as "10" and 7.5 as "7.5" (labels and log text only)."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def formula_number(value: float) -> str:
    """
    Render a number for formula text without losing precision.

    Integers drop the ".0"; anything else uses the shortest repr that
    reads back as the same float, so 65.000001 stays 65.000001.
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def round_display(value: float) -> float:
    """Round to display precision (2 decimals)."""
    return round(value, PRECISION_THRESHOLDS.display_decimals)


def safe_percent(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100
