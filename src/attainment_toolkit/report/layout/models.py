"""
Module: report.layout.models

Purpose:
    Data models for the report column layout.
    Immutable dataclasses for planned columns and their resolved positions.

Key Classes:
    - ColumnKind: Leaf column or one of the three summary slots
    - ColumnDefinition: One planned column
    - GroupColumns: Per-group quick access to leaf and summary positions
    - ColumnIndexMap: Position lookup built once per report

Dependencies:
    - dataclasses (std)
    - openpyxl.utils: Column letters

Used By:
    - report.layout.planner: Creates ColumnDefinitions
    - report.layout.index_map: Creates ColumnIndexMap
    - report.assembler: Header and row construction
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping, Optional, Tuple

from openpyxl.utils import get_column_letter

from attainment_toolkit.core.models import LeafItem


class ColumnKind(str, Enum):
    """What a planned column holds."""
    LEAF = "leaf"
    SUMMARY_OBTAINED = "summary-obtained"
    SUMMARY_ATTEMPTED = "summary-attempted"
    SUMMARY_PERCENT = "summary-percent"

    def __str__(self) -> str:
        return self.value

    @property
    def is_summary(self) -> bool:
        return self != ColumnKind.LEAF


SUMMARY_KINDS: Tuple[ColumnKind, ...] = (
    ColumnKind.SUMMARY_OBTAINED,
    ColumnKind.SUMMARY_ATTEMPTED,
    ColumnKind.SUMMARY_PERCENT,
)


@dataclass(frozen=True)
class SummaryLabels:
    """Display labels for the three summary slots of a group."""

    obtained: str = "Obtained"
    attempted: str = "Attempted"
    percent: str = "%"

    def for_kind(self, kind: ColumnKind) -> str:
        if kind == ColumnKind.SUMMARY_OBTAINED:
            return self.obtained
        if kind == ColumnKind.SUMMARY_ATTEMPTED:
            return self.attempted
        return self.percent


@dataclass(frozen=True)
class ColumnDefinition:
    """
    One planned column (immutable).

    Attributes:
        group_id: Owning outcome group
        kind: Leaf or summary slot
        label: Header text for the leaf-label tier
        category: Sub-category header ("ISE", "MSE", "Summary") or None
        max_marks: Leaf max marks (leaf columns only)
        leaf: The leaf item (leaf columns only)
    """

    group_id: int
    kind: ColumnKind
    label: str
    category: Optional[str] = None
    max_marks: Optional[float] = None
    leaf: Optional[LeafItem] = None

    @property
    def is_leaf(self) -> bool:
        return self.kind == ColumnKind.LEAF


@dataclass(frozen=True)
class GroupColumns:
    """
    Resolved column positions for one group.

    Attributes:
        group_id: Outcome group id
        leaf_columns: 1-based positions of the group's leaf columns, in plan order
        obtained_column: Position of the Obtained summary column
        attempted_column: Position of the Attempted summary column
        percent_column: Position of the Percent summary column
    """

    group_id: int
    leaf_columns: Tuple[int, ...]
    obtained_column: int
    attempted_column: int
    percent_column: int

    @property
    def first_column(self) -> int:
        """Leftmost column of the group (leaf or summary)."""
        return self.leaf_columns[0] if self.leaf_columns else self.obtained_column

    @property
    def last_column(self) -> int:
        return self.percent_column

    @property
    def span(self) -> int:
        """Number of columns the group occupies."""
        return self.last_column - self.first_column + 1

    def summary_column(self, kind: ColumnKind) -> int:
        if kind == ColumnKind.SUMMARY_OBTAINED:
            return self.obtained_column
        if kind == ColumnKind.SUMMARY_ATTEMPTED:
            return self.attempted_column
        if kind == ColumnKind.SUMMARY_PERCENT:
            return self.percent_column
        raise ValueError(f"Not a summary column kind: {kind}")


@dataclass(frozen=True)
class ColumnIndexMap:
    """
    Position lookup for a planned layout (immutable).

    The single source of truth for column addresses: formulas referencing
    "all leaf columns of group G" or "the percent column of group G" must
    go through this map.

    Attributes:
        columns: Planned column definitions, in plan order
        positions: 1-based output position for each definition
        groups: Per-group resolved positions, keyed by group id
        fixed_prefix_width: Identity columns before the first planned column
    """

    columns: Tuple[ColumnDefinition, ...]
    positions: Tuple[int, ...]
    groups: Mapping[int, GroupColumns]
    fixed_prefix_width: int

    @property
    def width(self) -> int:
        """Total column count including the identity prefix."""
        return self.fixed_prefix_width + len(self.columns)

    @property
    def group_ids(self) -> Tuple[int, ...]:
        """Group ids in plan order."""
        return tuple(self.groups.keys())

    def group(self, group_id: int) -> GroupColumns:
        return self.groups[group_id]

    def iter_columns(self) -> Iterator[Tuple[int, ColumnDefinition]]:
        """Yield (position, definition) pairs in plan order."""
        yield from zip(self.positions, self.columns)

    def address(self, column: int, row: int) -> str:
        """A1-style address, e.g. address(4, 14) -> "D14"."""
        return f"{column_letter(column)}{row}"


def column_letter(column: int) -> str:
    """1-based column number to spreadsheet letters (1 -> A, 27 -> AA)."""
    return get_column_letter(column)
