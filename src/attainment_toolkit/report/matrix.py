"""
Module: report.matrix

Purpose:
    The ReportMatrix output model: an ordered description of every row and
    cell of a report, handed to an external tabular-document writer.

Key Classes:
    - RowKind: header / student / blank / summary / legend
    - MatrixCell: One cell (text, number or DualValueCell)
    - MatrixRow: One 1-based row
    - MergedRange: A rectangular merge
    - ReportMetadata: Title and allotment identity
    - ReportMatrix: The whole report

Dependencies:
    - report.emission.cells: DualValueCell
    - report.layout.models: ColumnIndexMap

Used By:
    - report.assembler: Builds the matrix
    - report.output.xlsx_writer: Writes it
    - core.utils.serialization: JSON form
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

from .aggregation.banding import BandingPolicy
from .emission.cells import DualValueCell
from .layout.models import ColumnIndexMap, column_letter

PERCENT_FORMAT = "0.00"

CellValue = Union[str, int, float, DualValueCell]


class RowKind(str, Enum):
    """Role of a matrix row."""
    HEADER = "header"
    STUDENT = "student"
    BLANK = "blank"
    SUMMARY = "summary"
    LEGEND = "legend"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MatrixCell:
    """
    One cell.

    Attributes:
        column: 1-based column
        value: Text, number or DualValueCell
        present: False for a leaf cell whose mark is absent (value is 0)
        number_format: Display format for numeric cells, e.g. "0.00"
    """

    column: int
    value: CellValue
    present: bool = True
    number_format: Optional[str] = None

    @property
    def is_formula(self) -> bool:
        return isinstance(self.value, DualValueCell)

    @property
    def scalar(self) -> Union[str, int, float]:
        """Literal value; the fallback for formula cells."""
        if isinstance(self.value, DualValueCell):
            return self.value.fallback
        return self.value


@dataclass(frozen=True)
class MatrixRow:
    """A 1-based row and its cells, in column order."""

    row: int
    kind: RowKind
    cells: Tuple[MatrixCell, ...] = ()

    def cell(self, column: int) -> Optional[MatrixCell]:
        for cell in self.cells:
            if cell.column == column:
                return cell
        return None

    @property
    def label(self) -> Optional[str]:
        """Text of the first cell, if any."""
        first = self.cell(1)
        if first is not None and isinstance(first.value, str):
            return first.value
        return None


@dataclass(frozen=True)
class MergedRange:
    """Rectangular merge, all bounds inclusive and 1-based."""

    first_row: int
    first_column: int
    last_row: int
    last_column: int

    def __post_init__(self) -> None:
        if self.last_row < self.first_row or self.last_column < self.first_column:
            raise ValueError(f"Invalid merge bounds: {self}")

    @property
    def ref(self) -> str:
        """A1-style range like "A1:C3"."""
        return (
            f"{column_letter(self.first_column)}{self.first_row}:"
            f"{column_letter(self.last_column)}{self.last_row}"
        )


@dataclass(frozen=True)
class ReportMetadata:
    """Report identity, kept out of the cell grid."""

    title: str
    variant: str
    subject_code: str
    class_name: str
    semester: str
    teacher_name: str
    target: float
    policy: BandingPolicy
    subject_name: Optional[str] = None
    batch_label: Optional[str] = None


@dataclass(frozen=True)
class ReportMatrix:
    """
    A fully assembled report (immutable).

    Attributes:
        metadata: Title and allotment identity
        width: Total column count (identity prefix + planned columns)
        header_tiers: Header rows (3 for subject reports, 2 for lab reports)
        frozen_rows: Rows to freeze in the writer (equals header_tiers)
        merges: Merged ranges
        rows: Rows in output order, numbered from 1
        index_map: Column positions used for every formula reference
    """

    metadata: ReportMetadata
    width: int
    header_tiers: int
    frozen_rows: int
    merges: Tuple[MergedRange, ...]
    rows: Tuple[MatrixRow, ...]
    index_map: ColumnIndexMap

    @property
    def height(self) -> int:
        return len(self.rows)

    def row(self, number: int) -> MatrixRow:
        """Row by 1-based number."""
        return self.rows[number - 1]

    def cell(self, row: int, column: int) -> Optional[MatrixCell]:
        return self.row(row).cell(column)

    def rows_of(self, kind: RowKind) -> Tuple[MatrixRow, ...]:
        return tuple(r for r in self.rows if r.kind == kind)

    def find_row(self, label: str) -> Optional[MatrixRow]:
        """First non-student row whose first cell is `label`."""
        for r in self.rows:
            if r.kind != RowKind.STUDENT and r.label == label:
                return r
        return None

    def iter_cells(self) -> Iterator[Tuple[int, MatrixCell]]:
        """Yield (row number, cell) for every cell."""
        for r in self.rows:
            for cell in r.cells:
                yield r.row, cell
