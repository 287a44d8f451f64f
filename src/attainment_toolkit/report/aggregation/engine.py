"""
Module: report.aggregation.engine

Purpose:
    Per-student and per-group aggregation of sparse marks.

    - obtained(student, group): sum of present obtained marks (absent = 0)
    - possible(group): sum of leaf max marks, independent of any student
    - percent: obtained / possible * 100, or 0 when possible is 0
    - class aggregates: averages, count at/above target, class percent,
      attainment level

Key Functions:
    - obtained(), possible(), percent(): Scalar aggregations
    - attempted_only_percent(): Per-student denominator (interactive view only)
    - aggregate(): Precompute every result for one report run

Key Classes:
    - StudentGroupResult: Per (student, group) figures
    - GroupStatistics: Class-level figures for a group
    - AggregationResult: All results for one report run

Dependencies:
    - common.numbers: Guarded percentage, display rounding
    - report.layout.planner: Shared leaf order

Used By:
    - report.assembler: Fallback values for every derived cell
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

from attainment_toolkit.common.numbers import round_display, safe_percent
from attainment_toolkit.core.models import ObservedMark, OutcomeGroup, StudentRecord

from ..layout.models import ColumnDefinition, ColumnKind
from ..layout.planner import ordered_groups, ordered_leaves
from .banding import BandingPolicy, attainment_level

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Scalar aggregations
# ─────────────────────────────────────────────────────────────────────────────

def possible(group: OutcomeGroup) -> float:
    """Full point value of a group (the fixed "attempted" denominator)."""
    return sum(leaf.max_marks for leaf in ordered_leaves(group))


def obtained(student: StudentRecord, group: OutcomeGroup) -> float:
    """Sum of obtained marks in a group; ungraded leaves contribute 0."""
    return sum(
        ObservedMark.obtained_or_zero(student.mark_for(group.group_id, leaf))
        for leaf in ordered_leaves(group)
    )


def percent(student: StudentRecord, group: OutcomeGroup) -> float:
    """Full-precision percentage; 0 for a group with no possible marks."""
    return safe_percent(obtained(student, group), possible(group))


def attempted_only_percent(
    student: StudentRecord,
    group: OutcomeGroup,
) -> Tuple[float, float, float]:
    """
    Obtained, attempted and percent using only graded leaves.

    This is the on-screen summary's semantic: the denominator is the max
    of leaves the student has a mark for. The report engine never uses it.

    Returns:
        (obtained, attempted, percent)
    """
    total_obtained = 0.0
    total_attempted = 0.0
    for leaf in ordered_leaves(group):
        mark = student.mark_for(group.group_id, leaf)
        if mark is not None:
            total_obtained += mark.obtained
            total_attempted += mark.max
    return total_obtained, total_attempted, safe_percent(total_obtained, total_attempted)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


# ─────────────────────────────────────────────────────────────────────────────
# Result models
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StudentGroupResult:
    """
    Figures for one student in one group.

    Attributes:
        student_index: Position of the student in the payload
        group_id: Outcome group id
        obtained: Sum of obtained marks (absent = 0)
        possible: Group's full point value
        percent: Full-precision percentage
    """

    student_index: int
    group_id: int
    obtained: float
    possible: float
    percent: float

    @property
    def display_percent(self) -> float:
        return round_display(self.percent)

    def meets_target(self, target: float) -> bool:
        """Threshold comparison at full precision."""
        return self.percent >= target


@dataclass(frozen=True)
class GroupStatistics:
    """
    Class-level figures for one group.

    Attributes:
        group_id: Outcome group id
        possible: Group's full point value
        student_count: Students in the report
        average_obtained: Mean obtained marks
        average_percent: Mean percentage
        count_above_target: Students with percent >= target
        class_percent: count_above_target / student_count * 100 (0 with no students)
        attainment_level: Level under the selected banding policy
    """

    group_id: int
    possible: float
    student_count: int
    average_obtained: float
    average_percent: float
    count_above_target: int
    class_percent: float
    attainment_level: int

    @property
    def display_class_percent(self) -> float:
        return round_display(self.class_percent)


@dataclass(frozen=True)
class AggregationResult:
    """
    Every aggregate for one report run (write-once).

    Attributes:
        target: Per-student target percentage
        policy: Banding policy used for attainment levels
        student_results: (student_index, group_id) -> StudentGroupResult
        group_stats: group_id -> GroupStatistics
    """

    target: float
    policy: BandingPolicy
    groups: Tuple[OutcomeGroup, ...]
    students: Tuple[StudentRecord, ...]
    student_results: Dict[Tuple[int, int], StudentGroupResult] = field(default_factory=dict)
    group_stats: Dict[int, GroupStatistics] = field(default_factory=dict)

    def result_for(self, student_index: int, group_id: int) -> StudentGroupResult:
        return self.student_results[(student_index, group_id)]

    def stats_for(self, group_id: int) -> GroupStatistics:
        return self.group_stats[group_id]

    def group(self, group_id: int) -> OutcomeGroup:
        return next(g for g in self.groups if g.group_id == group_id)

    def cell_value(self, student_index: int, column: ColumnDefinition) -> float:
        """Full-precision value of a student's cell in a planned column."""
        if column.is_leaf:
            student = self.students[student_index]
            return ObservedMark.obtained_or_zero(student.mark_for(column.group_id, column.leaf))
        result = self.result_for(student_index, column.group_id)
        if column.kind == ColumnKind.SUMMARY_OBTAINED:
            return result.obtained
        if column.kind == ColumnKind.SUMMARY_ATTEMPTED:
            return result.possible
        return result.percent

    def column_average(self, column: ColumnDefinition) -> float:
        """Mean of a planned column's cell values over all students."""
        return mean([self.cell_value(i, column) for i in range(len(self.students))])


# ─────────────────────────────────────────────────────────────────────────────
# Aggregation pass
# ─────────────────────────────────────────────────────────────────────────────

def aggregate(
    groups: Sequence[OutcomeGroup],
    students: Sequence[StudentRecord],
    target: float,
    policy: BandingPolicy,
) -> AggregationResult:
    """
    Compute every per-student and per-group aggregate in one pass.

    Args:
        groups: Outcome groups (processed ascending by id)
        students: Students in input order
        target: Per-student target percentage
        policy: Banding policy for attainment levels

    Returns:
        AggregationResult with student results and group statistics

    Example:
        >>> result = aggregate(payload.groups, payload.students, 65, BandingPolicy.WITH_ZERO_FLOOR)
        >>> result.stats_for(1).attainment_level
        3
    """
    groups = tuple(ordered_groups(groups))
    students = tuple(students)
    student_results: Dict[Tuple[int, int], StudentGroupResult] = {}
    group_stats: Dict[int, GroupStatistics] = {}
    n = len(students)

    if n == 0:
        logger.warning("Aggregating a report with no students; class figures default to 0")

    for group in groups:
        group_possible = possible(group)
        group_results = []
        for index, student in enumerate(students):
            student_obtained = obtained(student, group)
            result = StudentGroupResult(
                student_index=index,
                group_id=group.group_id,
                obtained=student_obtained,
                possible=group_possible,
                percent=safe_percent(student_obtained, group_possible),
            )
            student_results[(index, group.group_id)] = result
            group_results.append(result)

        count = sum(1 for r in group_results if r.meets_target(target))
        class_percent = safe_percent(count, n)
        stats = GroupStatistics(
            group_id=group.group_id,
            possible=group_possible,
            student_count=n,
            average_obtained=mean([r.obtained for r in group_results]),
            average_percent=mean([r.percent for r in group_results]),
            count_above_target=count,
            class_percent=class_percent,
            attainment_level=attainment_level(class_percent, policy),
        )
        group_stats[group.group_id] = stats

        logger.debug(
            f"{group.label}: possible={group_possible}, above target={count}/{n}, "
            f"class={class_percent:.2f}%, level={stats.attainment_level}"
        )

    return AggregationResult(
        target=target,
        policy=policy,
        groups=groups,
        students=students,
        student_results=student_results,
        group_stats=group_stats,
    )
