"""
Module: groups

Purpose:
    Provides the OutcomeGroup dataclass - a Course Outcome (CO) or Learning
    Outcome (LO) owning an ordered tuple of leaf items.

Key Classes:
    - OutcomeGroup: Immutable outcome group

Dependencies:
    - dataclasses (std)
    - .leaves.LeafItem

Used By:
    - core.models.payload.ReportPayload
    - report.layout.planner
    - report.aggregation.engine
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from .leaves import LeafItem, LeafKind

_LEAF_ORDER = {LeafKind.ISE: 0, LeafKind.MSE: 1, LeafKind.LAB: 0}


@dataclass(frozen=True, slots=True)
class OutcomeGroup:
    """
    Outcome group (immutable).

    Leaf order is the input order and is never re-sorted by value. For
    subject groups all ISE leaves precede all MSE leaves.

    Attributes:
        group_id: Positive CO/LO number
        prefix: "CO" or "LO"
        leaves: Ordered leaf items (may be empty)

    Invariants:
        - group_id > 0
        - ISE leaves precede MSE leaves
        - lab leaves are never mixed with ISE/MSE leaves
        - no two leaves share a key

    Example:
        >>> g = OutcomeGroup(1, "CO", (LeafItem.ise(1, "Quiz", 10),))
        >>> g.label
        'CO1'
        >>> g.total_max_marks
        10
    """

    group_id: int
    prefix: str
    leaves: Tuple[LeafItem, ...] = ()

    def __post_init__(self) -> None:
        """Validate group on construction."""
        if self.group_id <= 0:
            raise ValueError(f"group_id must be positive: {self.group_id}")

        kinds = {leaf.kind for leaf in self.leaves}
        if LeafKind.LAB in kinds and len(kinds) > 1:
            raise ValueError(f"{self.label} mixes lab leaves with ISE/MSE leaves")

        last_rank = 0
        for leaf in self.leaves:
            rank = _LEAF_ORDER[leaf.kind]
            if rank < last_rank:
                raise ValueError(f"{self.label}: ISE leaves must precede MSE leaves")
            last_rank = rank

        seen = set()
        for leaf in self.leaves:
            if leaf.key in seen:
                raise ValueError(f"{self.label}: duplicate leaf {leaf.short_label}")
            seen.add(leaf.key)

    @property
    def label(self) -> str:
        """Display label like "CO1" or "LO3"."""
        return f"{self.prefix}{self.group_id}"

    @property
    def total_max_marks(self) -> float:
        """Sum of leaf max marks (always calculated, never stored)."""
        return sum(leaf.max_marks for leaf in self.leaves)

    @property
    def is_empty(self) -> bool:
        """True when the group has no leaves."""
        return not self.leaves

    def iter_leaves(self, kind: LeafKind | None = None) -> Iterator[LeafItem]:
        """Iterate leaves in order, optionally filtered by kind."""
        for leaf in self.leaves:
            if kind is None or leaf.kind == kind:
                yield leaf
