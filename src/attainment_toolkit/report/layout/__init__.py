"""
Module: report.layout

Purpose:
    Column layout for attainment reports.
    Plans the ordered column list and resolves column positions.

Key Functions:
    - plan_columns(): Groups + leaves -> ordered ColumnDefinitions
    - build_index_map(): ColumnDefinitions -> ColumnIndexMap

Key Classes:
    - ColumnDefinition: One planned column
    - ColumnIndexMap: Position lookup used for every formula reference

Used By:
    - report.assembler
"""

from .models import (
    ColumnDefinition,
    ColumnIndexMap,
    ColumnKind,
    GroupColumns,
    SummaryLabels,
    column_letter,
)
from .planner import ordered_groups, ordered_leaves, plan_columns
from .index_map import DEFAULT_FIXED_PREFIX_WIDTH, build_index_map

__all__ = [
    # Models
    "ColumnDefinition",
    "ColumnIndexMap",
    "ColumnKind",
    "GroupColumns",
    "SummaryLabels",
    "column_letter",
    # Functions
    "plan_columns",
    "ordered_groups",
    "ordered_leaves",
    "build_index_map",
    "DEFAULT_FIXED_PREFIX_WIDTH",
]
