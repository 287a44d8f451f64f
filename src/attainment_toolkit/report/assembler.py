"""
Module: report.assembler

Purpose:
    Orchestrates report assembly for both variants:
    planner -> index map -> aggregation -> dual-value emission -> matrix.

Key Functions:
    - assemble(): Build a ReportMatrix from a payload

Layout:
    Rows 1..T      Header tiers (T = 3 subject, 2 lab). Identity columns
                   are merged across all tiers; group cells are merged
                   across the group's leaf + summary columns.
    Rows T+1..     One row per student, in input order
    (blank)
    Average        Every leaf and summary column
    Count / % / Level
                   Placed in each group's Percent column
    Subject Target
    Legend         Levels for the selected banding policy

Dependencies:
    - report.layout: Column plan and positions
    - report.aggregation: Fallback values
    - report.emission: Formulas and agreement checks

Used By:
    - report.output.export_queue
    - External writers
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Union

from attainment_toolkit.common.numbers import format_number, round_display
from attainment_toolkit.core.models import ObservedMark, ReportPayload, ReportVariant

from .aggregation import AggregationResult, aggregate, legend_entries
from .config import IDENTITY_HEADERS, ReportConfig
from .emission import (
    Average,
    CellRange,
    CountAtLeast,
    Ref,
    SheetValues,
    banding_formula,
    class_percent,
    emit,
    guarded_percent,
    row_sum,
)
from .errors import FormulaMismatchError, ReportError
from .layout import ColumnIndexMap, ColumnKind, build_index_map, plan_columns
from .matrix import (
    PERCENT_FORMAT,
    MatrixCell,
    MatrixRow,
    MergedRange,
    ReportMatrix,
    ReportMetadata,
    RowKind,
)

logger = logging.getLogger(__name__)

SUBJECT_TITLE = "ISE – MSE ATTAINMENT ANALYSIS"
LAB_TITLE = "Course Outcome Attainment by Internal Evaluation"

AVERAGE_LABEL = "Average"
CLASS_PERCENT_LABEL = "Percentage of students"
ATTAINMENT_LABEL = "Attainment level"
TARGET_LABEL = "Subject Target"
LEGEND_HEADER = "Attainment"


def count_label(target: float) -> str:
    """Label of the above-target count row, e.g. "Students scoring above 65%"."""
    return f"Students scoring above {format_number(target)}%"


def assemble(
    payload: ReportPayload,
    variant: Union[ReportVariant, str],
    config: Optional[ReportConfig] = None,
) -> ReportMatrix:
    """
    Assemble a report matrix.

    Pipeline:
    1. Check leaf kinds against the variant
    2. Plan columns
    3. Build the column index map
    4. Aggregate marks
    5. Emit header, student and summary rows

    Args:
        payload: Report input
        variant: "subject-co" or "lab-lo"
        config: Report settings (defaults from ReportConfig.for_variant)

    Returns:
        ReportMatrix ready for a document writer

    Raises:
        FormulaMismatchError: If a formula disagrees with its fallback
        ReportError: If any other step fails

    Example:
        >>> matrix = assemble(payload, "subject-co")
        >>> matrix.frozen_rows
        3
    """
    start_time = time.perf_counter()

    try:
        variant = ReportVariant(variant)
    except ValueError as e:
        raise ReportError(f"Unknown report variant: {variant!r}") from e

    if config is None:
        config = ReportConfig.for_variant(variant, payload.allotment.subject_code)
    elif config.variant != variant:
        raise ReportError(f"Config is for {config.variant}, not {variant}")

    logger.info(
        f"Assembling {variant} report for {payload.allotment.subject_code} "
        f"({payload.student_count} students, {len(payload.groups)} groups, "
        f"target {format_number(config.target)}%, {config.policy})"
    )

    try:
        # 1. Leaf kinds
        _check_variant(payload, variant)

        # 2. Column plan
        columns = plan_columns(payload.groups, config.summary_labels)
        logger.info(f"Planned {len(columns)} outcome columns")

        # 3. Positions
        index_map = build_index_map(columns, config.fixed_prefix_width)

        # 4. Aggregation
        aggregation = aggregate(payload.groups, payload.students, config.target, config.policy)
        logger.info(f"Aggregated {len(aggregation.group_stats)} groups")

        # 5. Rows
        matrix = _MatrixBuilder(payload, variant, config, index_map, aggregation).build()
    except ReportError:
        raise
    except (ValueError, KeyError, TypeError) as e:
        raise ReportError(f"Failed to assemble {variant} report: {e}") from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"Assembled {matrix.height} rows x {matrix.width} columns in {elapsed:.3f}s")
    return matrix


def _check_variant(payload: ReportPayload, variant: ReportVariant) -> None:
    unexpected = payload.leaf_kinds - variant.leaf_kinds
    if unexpected:
        kinds = ", ".join(sorted(k.value for k in unexpected))
        raise ReportError(f"{variant} report cannot contain {kinds} leaves")
    for group in payload.groups:
        if group.prefix != variant.group_prefix:
            raise ReportError(f"{variant} report cannot contain group {group.label}")


# ─────────────────────────────────────────────────────────────────────────────
# Matrix construction
# ─────────────────────────────────────────────────────────────────────────────

class _MatrixBuilder:
    """Accumulates rows for one report run; discarded after build()."""

    def __init__(
        self,
        payload: ReportPayload,
        variant: ReportVariant,
        config: ReportConfig,
        index_map: ColumnIndexMap,
        aggregation: AggregationResult,
    ):
        self.payload = payload
        self.variant = variant
        self.config = config
        self.index_map = index_map
        self.aggregation = aggregation
        self.header_tiers = 3 if variant == ReportVariant.SUBJECT_CO else 2
        self.values = SheetValues()
        self.rows: List[MatrixRow] = []
        self.merges: List[MergedRange] = []

    @property
    def next_row(self) -> int:
        return len(self.rows) + 1

    @property
    def first_student_row(self) -> int:
        return self.header_tiers + 1

    @property
    def last_student_row(self) -> int:
        return self.header_tiers + self.payload.student_count

    def build(self) -> ReportMatrix:
        self._add_headers()
        self._add_students()
        logger.debug(f"Placed {self.payload.student_count} student rows")
        self._add_summary()
        if self.config.include_legend:
            self._add_legend()
        logger.debug(f"Checked {len(self.values)} cell values")

        allotment = self.payload.allotment
        metadata = ReportMetadata(
            title=SUBJECT_TITLE if self.variant == ReportVariant.SUBJECT_CO else LAB_TITLE,
            variant=self.variant.value,
            subject_code=allotment.subject_code,
            subject_name=allotment.subject_name,
            class_name=allotment.class_name,
            semester=allotment.semester,
            teacher_name=self.payload.teacher_name,
            target=self.config.target,
            policy=self.config.policy,
            batch_label=allotment.batch_label if self.variant == ReportVariant.LAB_LO else None,
        )
        return ReportMatrix(
            metadata=metadata,
            width=self.index_map.width,
            header_tiers=self.header_tiers,
            frozen_rows=self.header_tiers,
            merges=tuple(self.merges),
            rows=tuple(self.rows),
            index_map=self.index_map,
        )

    def _append(self, kind: RowKind, cells: List[MatrixCell]) -> int:
        row = self.next_row
        self.rows.append(MatrixRow(row=row, kind=kind, cells=tuple(sorted(cells, key=lambda c: c.column))))
        return row

    def _merge(self, first_row: int, first_column: int, last_row: int, last_column: int) -> None:
        if first_row == last_row and first_column == last_column:
            return
        self.merges.append(MergedRange(first_row, first_column, last_row, last_column))

    # ─────────────────────────────────────────────────────────────────────────
    # Header tiers
    # ─────────────────────────────────────────────────────────────────────────

    def _add_headers(self) -> None:
        tiers = self.header_tiers
        prefix = self.config.fixed_prefix_width

        # Tier 1: identity + group labels
        cells = [MatrixCell(column=i + 1, value=text) for i, text in enumerate(IDENTITY_HEADERS)]
        for column in range(1, prefix + 1):
            self._merge(1, column, tiers, column)
        for group in self.aggregation.groups:
            gc = self.index_map.group(group.group_id)
            cells.append(MatrixCell(column=gc.first_column, value=group.label))
            self._merge(1, gc.first_column, 1, gc.last_column)
        self._append(RowKind.HEADER, cells)

        # Tier 2 (subject only): ISE / MSE / Summary runs
        if tiers == 3:
            cells = []
            run_start = None
            run_key = None
            for position, column in self.index_map.iter_columns():
                key = (column.group_id, column.category)
                if key != run_key:
                    if run_start is not None:
                        self._merge(2, run_start, 2, position - 1)
                    cells.append(MatrixCell(column=position, value=column.category or ""))
                    run_start, run_key = position, key
            if run_start is not None:
                self._merge(2, run_start, 2, self.index_map.width)
            self._append(RowKind.HEADER, cells)

        # Last tier: leaf labels and summary labels
        cells = [
            MatrixCell(column=position, value=column.label)
            for position, column in self.index_map.iter_columns()
        ]
        self._append(RowKind.HEADER, cells)

    # ─────────────────────────────────────────────────────────────────────────
    # Student rows
    # ─────────────────────────────────────────────────────────────────────────

    def _add_students(self) -> None:
        for index, student in enumerate(self.payload.students):
            row = self.next_row
            cells = [
                MatrixCell(column=1, value=student.roll_no),
                MatrixCell(column=2, value=student.pid),
                MatrixCell(column=3, value=student.name),
            ]

            for position, column in self.index_map.iter_columns():
                gc = self.index_map.group(column.group_id)
                result = self.aggregation.result_for(index, column.group_id)

                if column.kind == ColumnKind.LEAF:
                    mark = student.mark_for(column.group_id, column.leaf)
                    value = ObservedMark.obtained_or_zero(mark)
                    self.values.put(position, row, value)
                    cells.append(MatrixCell(column=position, value=value, present=mark is not None))
                elif column.kind == ColumnKind.SUMMARY_OBTAINED:
                    cell = emit(
                        self.values, position, row,
                        row_sum(gc.leaf_columns, row),
                        round_display(result.obtained),
                    )
                    cells.append(MatrixCell(column=position, value=cell))
                elif column.kind == ColumnKind.SUMMARY_ATTEMPTED:
                    # Fixed denominator: the group's full point value
                    self.values.put(position, row, result.possible)
                    cells.append(MatrixCell(column=position, value=result.possible))
                else:
                    cell = emit(
                        self.values, position, row,
                        guarded_percent(Ref(gc.obtained_column, row), Ref(gc.attempted_column, row)),
                        result.display_percent,
                    )
                    cells.append(MatrixCell(column=position, value=cell, number_format=PERCENT_FORMAT))

            self._append(RowKind.STUDENT, cells)

    # ─────────────────────────────────────────────────────────────────────────
    # Summary block
    # ─────────────────────────────────────────────────────────────────────────

    def _student_range(self, column: int) -> CellRange:
        return CellRange.column_span(column, self.first_student_row, self.last_student_row)

    def _label_cells(self, label: str) -> List[MatrixCell]:
        self._merge(self.next_row, 1, self.next_row, self.config.fixed_prefix_width)
        return [MatrixCell(column=1, value=label)]

    def _add_summary(self) -> None:
        self._append(RowKind.BLANK, [])

        # Column averages
        row = self.next_row
        cells = self._label_cells(AVERAGE_LABEL)
        for position, column in self.index_map.iter_columns():
            cell = emit(
                self.values, position, row,
                Average(self._student_range(position)),
                round_display(self.aggregation.column_average(column)),
            )
            cells.append(MatrixCell(column=position, value=cell, number_format=PERCENT_FORMAT))
        self._append(RowKind.SUMMARY, cells)

        groups = self.aggregation.groups
        n = self.payload.student_count

        # Students at or above target
        count_row = self.next_row
        cells = self._label_cells(count_label(self.config.target))
        for group in groups:
            pct_col = self.index_map.group(group.group_id).percent_column
            stats = self.aggregation.stats_for(group.group_id)
            cell = emit(
                self.values, pct_col, count_row,
                CountAtLeast(self._student_range(pct_col), self.config.target),
                stats.count_above_target,
            )
            cells.append(MatrixCell(column=pct_col, value=cell))
        self._append(RowKind.SUMMARY, cells)

        # Percentage of students
        class_row = self.next_row
        cells = self._label_cells(CLASS_PERCENT_LABEL)
        for group in groups:
            pct_col = self.index_map.group(group.group_id).percent_column
            stats = self.aggregation.stats_for(group.group_id)
            cell = emit(
                self.values, pct_col, class_row,
                class_percent(Ref(pct_col, count_row), n),
                stats.display_class_percent,
            )
            cells.append(MatrixCell(column=pct_col, value=cell, number_format=PERCENT_FORMAT))
        self._append(RowKind.SUMMARY, cells)

        # Attainment level
        level_row = self.next_row
        cells = self._label_cells(ATTAINMENT_LABEL)
        for group in groups:
            pct_col = self.index_map.group(group.group_id).percent_column
            stats = self.aggregation.stats_for(group.group_id)
            cell = emit(
                self.values, pct_col, level_row,
                banding_formula(Ref(pct_col, class_row), self.config.policy),
                stats.attainment_level,
            )
            cells.append(MatrixCell(column=pct_col, value=cell))
        self._append(RowKind.SUMMARY, cells)

        self._append(RowKind.SUMMARY, [
            MatrixCell(column=1, value=TARGET_LABEL),
            MatrixCell(column=2, value=self.config.target),
        ])

        for group in groups:
            stats = self.aggregation.stats_for(group.group_id)
            logger.debug(
                f"{group.label}: {stats.count_above_target}/{n} above target, "
                f"level {stats.attainment_level}"
            )

    def _add_legend(self) -> None:
        target = format_number(self.config.target)
        self._append(RowKind.LEGEND, [
            MatrixCell(column=1, value=LEGEND_HEADER),
            MatrixCell(column=2, value=f"Condition (Students scoring above {target}%)"),
        ])
        for level, condition in legend_entries(self.config.policy, self.config.target):
            self._append(RowKind.LEGEND, [
                MatrixCell(column=1, value=level),
                MatrixCell(column=2, value=condition),
            ])
