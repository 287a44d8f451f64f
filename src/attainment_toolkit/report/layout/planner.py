"""
Module: report.layout.planner

Purpose:
    Expand ordered groups and leaves into the canonical column plan.
    Pure and total: the plan depends only on groups and leaves, never on
    student data.

Key Functions:
    - plan_columns(): Main planning entry point
    - ordered_groups(): Groups in ascending id order
    - ordered_leaves(): Leaves of a group in plan order

Algorithm:
    For each group in ascending id order:
    1. One leaf column per leaf (ISE then MSE in input order; lab leaves
       by experiment number)
    2. Exactly three summary columns: Obtained, Attempted, Percent
    A group with no leaves still gets its three summary columns.

Dependencies:
    - report.layout.models: ColumnDefinition, SummaryLabels

Used By:
    - report.assembler: Pipeline step 1
    - report.aggregation.engine: Shared leaf order
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from attainment_toolkit.core.models import LeafItem, LeafKind, OutcomeGroup

from .models import SUMMARY_KINDS, ColumnDefinition, ColumnKind, SummaryLabels

logger = logging.getLogger(__name__)

SUMMARY_CATEGORY = "Summary"


def ordered_groups(groups: Iterable[OutcomeGroup]) -> List[OutcomeGroup]:
    """Groups sorted by ascending id (stable)."""
    return sorted(groups, key=lambda g: g.group_id)


def ordered_leaves(group: OutcomeGroup) -> Tuple[LeafItem, ...]:
    """
    Leaves of a group in plan order.

    Lab leaves follow experiment number; ISE/MSE leaves keep input order
    (the group already guarantees ISE before MSE).
    """
    if any(leaf.kind == LeafKind.LAB for leaf in group.leaves):
        return tuple(sorted(group.leaves, key=lambda leaf: leaf.exp_no))
    return group.leaves


def plan_columns(
    groups: Sequence[OutcomeGroup],
    summary_labels: SummaryLabels = SummaryLabels(),
) -> List[ColumnDefinition]:
    """
    Plan the ordered column list for a report.

    Args:
        groups: Outcome groups (any order; planned ascending by id)
        summary_labels: Header labels for the three summary slots

    Returns:
        Column definitions in plan order. Empty for an empty group list.

    Example:
        >>> cols = plan_columns([OutcomeGroup(1, "CO", (LeafItem.ise(1, "Quiz", 10),))])
        >>> [c.kind.value for c in cols]
        ['leaf', 'summary-obtained', 'summary-attempted', 'summary-percent']
    """
    columns: List[ColumnDefinition] = []

    for group in ordered_groups(groups):
        leaves = ordered_leaves(group)
        if not leaves:
            logger.warning(f"{group.label} has no leaf items; emitting summary columns only")

        for leaf in leaves:
            columns.append(ColumnDefinition(
                group_id=group.group_id,
                kind=ColumnKind.LEAF,
                label=leaf.display_label,
                category=leaf.category,
                max_marks=leaf.max_marks,
                leaf=leaf,
            ))

        for kind in SUMMARY_KINDS:
            columns.append(ColumnDefinition(
                group_id=group.group_id,
                kind=kind,
                label=summary_labels.for_kind(kind),
                category=SUMMARY_CATEGORY,
            ))

    logger.debug(f"Planned {len(columns)} columns for {len(groups)} groups")
    return columns
