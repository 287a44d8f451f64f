"""
Unit Tests for Column Index Map
"""

import pytest

from attainment_toolkit.core.models import OutcomeGroup
from attainment_toolkit.report.layout import (
    ColumnDefinition,
    ColumnKind,
    build_index_map,
    column_letter,
    plan_columns,
)


class TestBuildIndexMap:
    """Tests for build_index_map()."""

    def test_build_when_prefix_three_then_first_column_is_four(self, subject_payload):
        index_map = build_index_map(plan_columns(subject_payload.groups), 3)
        assert index_map.positions[0] == 4
        assert index_map.width == 13

    def test_build_when_subject_payload_then_group_positions(self, subject_payload):
        index_map = build_index_map(plan_columns(subject_payload.groups))
        co1 = index_map.group(1)
        assert co1.leaf_columns == (4, 5, 6)
        assert (co1.obtained_column, co1.attempted_column, co1.percent_column) == (7, 8, 9)
        co2 = index_map.group(2)
        assert co2.leaf_columns == (10,)
        assert co2.percent_column == 13
        assert index_map.group_ids == (1, 2)

    def test_build_when_zero_leaf_group_then_first_column_is_obtained(self):
        index_map = build_index_map(plan_columns([OutcomeGroup(1, "CO")]))
        group = index_map.group(1)
        assert group.leaf_columns == ()
        assert group.first_column == 4
        assert group.span == 3

    def test_build_when_negative_prefix_then_raises_error(self):
        with pytest.raises(ValueError, match="non-negative"):
            build_index_map([], -1)

    def test_build_when_summary_slot_missing_then_raises_error(self):
        columns = [ColumnDefinition(group_id=1, kind=ColumnKind.SUMMARY_OBTAINED, label="Obtained")]
        with pytest.raises(ValueError, match="missing summary columns"):
            build_index_map(columns)

    def test_address_when_column_and_row_then_a1_reference(self, subject_payload):
        index_map = build_index_map(plan_columns(subject_payload.groups))
        assert index_map.address(4, 14) == "D14"
        assert column_letter(27) == "AA"
