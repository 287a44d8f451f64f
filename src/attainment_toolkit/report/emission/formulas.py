"""
Module: report.emission.formulas

Purpose:
    Small spreadsheet expression tree. Every node renders to formula text
    and evaluates against a cell resolver, so a formula can be checked
    against an independently computed fallback before it is emitted.

    Only the constructs the reports need exist here: references, ranges,
    SUM, IFERROR(AVERAGE), COUNTIF(">="), division, multiplication,
    comparisons and IF.

Key Classes:
    - Expression: Base node (render / evaluate)
    - Ref, CellRange, Number: Leaves
    - Sum, Average, CountAtLeast, Div, Mul, Compare, If, IfError: Operators

Key Functions:
    - banding_formula(): Nested IF for an attainment policy

Dependencies:
    - report.layout.models: column_letter
    - report.aggregation.banding: BandingPolicy

Used By:
    - report.emission.cells: Dual-value emission
    - report.assembler: Formula construction
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple, Union

from attainment_toolkit.common.numbers import formula_number
from attainment_toolkit.common.thresholds import BAND_THRESHOLDS, AttainmentBandThresholds

from ..aggregation.banding import BandingPolicy
from ..layout.models import column_letter

# (column, row) -> current cell value
Resolver = Callable[[int, int], float]


class Expression:
    """Base class for formula nodes."""

    def render(self) -> str:
        raise NotImplementedError

    def evaluate(self, resolve: Resolver) -> float:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


# ─────────────────────────────────────────────────────────────────────────────
# Leaves
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Number(Expression):
    value: float

    def render(self) -> str:
        return formula_number(self.value)

    def evaluate(self, resolve: Resolver) -> float:
        return self.value


@dataclass(frozen=True)
class Ref(Expression):
    """Single cell reference."""
    column: int
    row: int

    def render(self) -> str:
        return f"{column_letter(self.column)}{self.row}"

    def evaluate(self, resolve: Resolver) -> float:
        return resolve(self.column, self.row)


@dataclass(frozen=True)
class CellRange:
    """
    Rectangular range; empty when last < first on either axis.

    Example:
        >>> CellRange(4, 14, 4, 20).render()
        'D14:D20'
    """
    first_column: int
    first_row: int
    last_column: int
    last_row: int

    @classmethod
    def column_span(cls, column: int, first_row: int, last_row: int) -> CellRange:
        return cls(column, first_row, column, last_row)

    @property
    def is_empty(self) -> bool:
        return self.last_column < self.first_column or self.last_row < self.first_row

    def cells(self) -> Iterator[Tuple[int, int]]:
        for row in range(self.first_row, self.last_row + 1):
            for column in range(self.first_column, self.last_column + 1):
                yield column, row

    def values(self, resolve: Resolver) -> List[float]:
        return [resolve(column, row) for column, row in self.cells()]

    def render(self) -> str:
        start = f"{column_letter(self.first_column)}{self.first_row}"
        end = f"{column_letter(self.last_column)}{self.last_row}"
        return start if start == end else f"{start}:{end}"


Operand = Union[Ref, CellRange]


# ─────────────────────────────────────────────────────────────────────────────
# Aggregate functions
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Sum(Expression):
    """SUM over references and ranges; renders "0" with no operands."""
    operands: Tuple[Operand, ...]

    def _live(self) -> List[Operand]:
        return [op for op in self.operands if not (isinstance(op, CellRange) and op.is_empty)]

    def render(self) -> str:
        live = self._live()
        if not live:
            return "0"
        return f"SUM({','.join(op.render() for op in live)})"

    def evaluate(self, resolve: Resolver) -> float:
        values: List[float] = []
        for op in self._live():
            if isinstance(op, CellRange):
                values.extend(op.values(resolve))
            else:
                values.append(op.evaluate(resolve))
        return sum(values)


@dataclass(frozen=True)
class Average(Expression):
    """IFERROR(AVERAGE(range),0); renders "0" for an empty range."""
    cells: CellRange

    def render(self) -> str:
        if self.cells.is_empty:
            return "0"
        return f"IFERROR(AVERAGE({self.cells.render()}),0)"

    def evaluate(self, resolve: Resolver) -> float:
        values = self.cells.values(resolve) if not self.cells.is_empty else []
        if not values:
            return 0.0
        return sum(values) / len(values)


@dataclass(frozen=True)
class CountAtLeast(Expression):
    """COUNTIF(range,">=threshold"); renders "0" for an empty range."""
    cells: CellRange
    threshold: float

    def render(self) -> str:
        if self.cells.is_empty:
            return "0"
        return f'COUNTIF({self.cells.render()},">={formula_number(self.threshold)}")'

    def evaluate(self, resolve: Resolver) -> float:
        if self.cells.is_empty:
            return 0
        return sum(1 for v in self.cells.values(resolve) if v >= self.threshold)


# ─────────────────────────────────────────────────────────────────────────────
# Arithmetic and logic
# ─────────────────────────────────────────────────────────────────────────────

def _operand(expr: Expression) -> str:
    """Parenthesize compound right-hand operands."""
    if isinstance(expr, (Div, Mul)):
        return f"({expr.render()})"
    return expr.render()


@dataclass(frozen=True)
class Div(Expression):
    """left/right; evaluation raises ZeroDivisionError like #DIV/0!."""
    left: Expression
    right: Expression

    def render(self) -> str:
        return f"{self.left.render()}/{_operand(self.right)}"

    def evaluate(self, resolve: Resolver) -> float:
        return self.left.evaluate(resolve) / self.right.evaluate(resolve)


@dataclass(frozen=True)
class Mul(Expression):
    left: Expression
    right: Expression

    def render(self) -> str:
        return f"{self.left.render()}*{_operand(self.right)}"

    def evaluate(self, resolve: Resolver) -> float:
        return self.left.evaluate(resolve) * self.right.evaluate(resolve)


_COMPARATORS = {
    "=": lambda a, b: a == b,
    ">=": lambda a, b: a >= b,
    ">": lambda a, b: a > b,
}


@dataclass(frozen=True)
class Compare(Expression):
    left: Expression
    op: str
    right: Expression

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ValueError(f"Unsupported comparison: {self.op!r}")

    def render(self) -> str:
        return f"{self.left.render()}{self.op}{self.right.render()}"

    def evaluate(self, resolve: Resolver) -> float:
        return 1.0 if _COMPARATORS[self.op](self.left.evaluate(resolve), self.right.evaluate(resolve)) else 0.0


@dataclass(frozen=True)
class If(Expression):
    condition: Compare
    then: Expression
    otherwise: Expression

    def render(self) -> str:
        return f"IF({self.condition.render()},{self.then.render()},{self.otherwise.render()})"

    def evaluate(self, resolve: Resolver) -> float:
        if self.condition.evaluate(resolve):
            return self.then.evaluate(resolve)
        return self.otherwise.evaluate(resolve)


@dataclass(frozen=True)
class IfError(Expression):
    """IFERROR(expr,fallback); only division errors are trapped."""
    expr: Expression
    fallback: Expression

    def render(self) -> str:
        return f"IFERROR({self.expr.render()},{self.fallback.render()})"

    def evaluate(self, resolve: Resolver) -> float:
        try:
            return self.expr.evaluate(resolve)
        except ZeroDivisionError:
            return self.fallback.evaluate(resolve)


# ─────────────────────────────────────────────────────────────────────────────
# Report formulas
# ─────────────────────────────────────────────────────────────────────────────

def guarded_percent(obtained: Expression, attempted: Expression) -> Expression:
    """IF(attempted=0,0,obtained/attempted*100)."""
    return If(
        Compare(attempted, "=", Number(0)),
        Number(0),
        Mul(Div(obtained, attempted), Number(100)),
    )


def class_percent(count: Expression, total_students: int) -> Expression:
    """IFERROR(count/N*100,0)."""
    return IfError(Mul(Div(count, Number(total_students)), Number(100)), Number(0))


def banding_formula(
    class_pct: Expression,
    policy: BandingPolicy,
    bands: AttainmentBandThresholds = BAND_THRESHOLDS,
) -> Expression:
    """
    Nested IF classifying a class percentage.

    WITH_ZERO_FLOOR: IF(p>=60,3,IF(p>=50,2,IF(p>0,1,0)))
    NO_ZERO_FLOOR:   IF(p>=60,3,IF(p>=50,2,1))
    """
    if policy == BandingPolicy.WITH_ZERO_FLOOR:
        lowest: Expression = If(Compare(class_pct, ">", Number(0)), Number(1), Number(0))
    else:
        lowest = Number(1)
    return If(
        Compare(class_pct, ">=", Number(bands.level_3_min_percent)),
        Number(3),
        If(
            Compare(class_pct, ">=", Number(bands.level_2_min_percent)),
            Number(2),
            lowest,
        ),
    )


def row_sum(columns: Tuple[int, ...], row: int) -> Sum:
    """SUM over a row's columns, collapsing contiguous runs into ranges."""
    operands: List[Operand] = []
    start = prev = None
    for column in columns:
        if start is None:
            start = prev = column
        elif column == prev + 1:
            prev = column
        else:
            operands.append(_span(start, prev, row))
            start = prev = column
    if start is not None:
        operands.append(_span(start, prev, row))
    return Sum(tuple(operands))


def _span(first: int, last: int, row: int) -> Operand:
    if first == last:
        return Ref(first, row)
    return CellRange(first, row, last, row)
