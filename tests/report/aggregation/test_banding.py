"""
Unit Tests for Attainment Banding
"""

import pytest

from attainment_toolkit.report.aggregation import BandingPolicy, attainment_level, legend_entries


class TestAttainmentLevel:
    """Tests for attainment_level()."""

    @pytest.mark.parametrize("class_percent, expected", [
        (100, 3), (60, 3), (59.99, 2), (50, 2), (49.99, 1), (0.01, 1), (0, 0),
    ])
    def test_level_when_with_zero_floor_then_bands(self, class_percent, expected):
        assert attainment_level(class_percent, BandingPolicy.WITH_ZERO_FLOOR) == expected

    @pytest.mark.parametrize("class_percent, expected", [
        (100, 3), (60, 3), (50, 2), (49.99, 1), (0, 1),
    ])
    def test_level_when_no_zero_floor_then_never_zero(self, class_percent, expected):
        assert attainment_level(class_percent, BandingPolicy.NO_ZERO_FLOOR) == expected

    @pytest.mark.parametrize("policy", list(BandingPolicy))
    def test_level_when_class_percent_rises_then_never_decreases(self, policy):
        """Monotonic non-decreasing step function."""
        levels = [attainment_level(p / 4, policy) for p in range(0, 401)]
        assert levels == sorted(levels)
        assert min(levels) == policy.lowest_level


class TestLegendEntries:
    """Tests for legend_entries()."""

    def test_legend_when_with_zero_floor_then_four_levels(self):
        entries = legend_entries(BandingPolicy.WITH_ZERO_FLOOR, 65)
        assert [level for level, _ in entries] == [3, 2, 1, 0]
        assert entries[0][1] == "If 60% and above students have scored above 65%"
        assert entries[3][1] == "If no student has scored above 65%"

    def test_legend_when_no_zero_floor_then_three_levels(self):
        entries = legend_entries(BandingPolicy.NO_ZERO_FLOOR, 75)
        assert [level for level, _ in entries] == [3, 2, 1]
        assert entries[2][1] == "If less than 50% of students have scored above 75%"
