"""
Module: report.layout.index_map

Purpose:
    Build the ColumnIndexMap from a column plan. Positions are assigned
    once here; no other module computes column positions.

Key Functions:
    - build_index_map(): Assign positions and per-group lookups

Dependencies:
    - report.layout.models: ColumnDefinition, ColumnIndexMap, GroupColumns

Used By:
    - report.assembler: Pipeline step 2
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from .models import ColumnDefinition, ColumnIndexMap, ColumnKind, GroupColumns

logger = logging.getLogger(__name__)

# Roll number, PID, name
DEFAULT_FIXED_PREFIX_WIDTH = 3


def build_index_map(
    columns: Sequence[ColumnDefinition],
    fixed_prefix_width: int = DEFAULT_FIXED_PREFIX_WIDTH,
) -> ColumnIndexMap:
    """
    Assign output positions to planned columns.

    The i-th column (0-indexed) lands at `fixed_prefix_width + i + 1`.

    Args:
        columns: Column plan from plan_columns()
        fixed_prefix_width: Number of identity columns before the plan

    Returns:
        ColumnIndexMap with per-group leaf and summary positions

    Raises:
        ValueError: If a group in the plan lacks one of its summary columns
    """
    if fixed_prefix_width < 0:
        raise ValueError(f"fixed_prefix_width must be non-negative: {fixed_prefix_width}")

    positions: List[int] = []
    leaf_cols: Dict[int, List[int]] = {}
    summary_cols: Dict[int, Dict[ColumnKind, int]] = {}

    for i, col in enumerate(columns):
        position = fixed_prefix_width + i + 1
        positions.append(position)
        leaf_cols.setdefault(col.group_id, [])
        summary_cols.setdefault(col.group_id, {})
        if col.is_leaf:
            leaf_cols[col.group_id].append(position)
        else:
            summary_cols[col.group_id][col.kind] = position

    groups: Dict[int, GroupColumns] = {}
    for group_id, leaves in leaf_cols.items():
        slots = summary_cols[group_id]
        missing = [k.value for k in (
            ColumnKind.SUMMARY_OBTAINED,
            ColumnKind.SUMMARY_ATTEMPTED,
            ColumnKind.SUMMARY_PERCENT,
        ) if k not in slots]
        if missing:
            raise ValueError(f"Group {group_id} is missing summary columns: {missing}")
        groups[group_id] = GroupColumns(
            group_id=group_id,
            leaf_columns=tuple(leaves),
            obtained_column=slots[ColumnKind.SUMMARY_OBTAINED],
            attempted_column=slots[ColumnKind.SUMMARY_ATTEMPTED],
            percent_column=slots[ColumnKind.SUMMARY_PERCENT],
        )

    logger.debug(f"Indexed {len(positions)} columns across {len(groups)} groups")

    return ColumnIndexMap(
        columns=tuple(columns),
        positions=tuple(positions),
        groups=groups,
        fixed_prefix_width=fixed_prefix_width,
    )
