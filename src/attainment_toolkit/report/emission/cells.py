"""
Module: report.emission.cells

Purpose:
    Dual-value emission: every derived cell carries both a live formula
    and a precomputed fallback, and the two must agree. The formula is
    evaluated against the values already placed in the sheet; a
    disagreement beyond the tolerance raises FormulaMismatchError before
    anything is written.

Key Classes:
    - DualValueCell: {formula, fallback} record for a derived cell
    - SheetValues: Full-precision values of placed cells (the resolver)

Key Functions:
    - emit(): Evaluate, check agreement, record, return the cell

Dependencies:
    - report.emission.formulas: Expression tree
    - common.thresholds: Agreement tolerance

Used By:
    - report.assembler
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from attainment_toolkit.common.thresholds import PRECISION_THRESHOLDS

from ..errors import FormulaMismatchError
from ..layout.models import column_letter
from .formulas import Expression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DualValueCell:
    """
    A derived cell.

    Attributes:
        formula: Formula text without the leading "="
        fallback: Display value (rounded where the column is a percentage)
    """

    formula: str
    fallback: float

    @property
    def formula_text(self) -> str:
        """Formula as typed into a spreadsheet, e.g. "=SUM(D5:F5)"."""
        return f"={self.formula}"


class SheetValues:
    """
    Full-precision values of cells placed so far, keyed by (column, row).

    Formula cells store their evaluated value rather than the rounded
    fallback, matching what a spreadsheet application would compute.
    """

    def __init__(self):
        self._values: Dict[Tuple[int, int], float] = {}

    def __call__(self, column: int, row: int) -> float:
        try:
            return self._values[(column, row)]
        except KeyError:
            # Blank cells read as 0 in arithmetic
            return 0.0

    def __len__(self) -> int:
        return len(self._values)

    def put(self, column: int, row: int, value: float) -> None:
        self._values[(column, row)] = value


def emit(
    values: SheetValues,
    column: int,
    row: int,
    expression: Expression,
    fallback: float,
    tolerance: float = PRECISION_THRESHOLDS.agreement_tolerance,
) -> DualValueCell:
    """
    Build a derived cell and record its evaluated value.

    Args:
        values: Cells placed so far; updated with this cell's value
        column: 1-based column of the cell
        row: 1-based row of the cell
        expression: Formula for the cell
        fallback: Independently computed display value
        tolerance: Maximum allowed |formula - fallback| (exclusive)

    Returns:
        DualValueCell with rendered formula and fallback

    Raises:
        FormulaMismatchError: If the formula cannot be evaluated or
            disagrees with the fallback
    """
    address = f"{column_letter(column)}{row}"
    formula = expression.render()

    try:
        evaluated = float(expression.evaluate(values))
    except ZeroDivisionError as e:
        raise FormulaMismatchError(
            f"{address}: formula {formula} evaluates to #DIV/0!",
            address=address,
            formula=formula,
        ) from e

    if abs(evaluated - fallback) >= tolerance:
        logger.error(f"{address}: formula {formula} = {evaluated}, fallback = {fallback}")
        raise FormulaMismatchError(
            f"{address}: formula {formula} evaluates to {evaluated}, fallback is {fallback}",
            address=address,
            formula=formula,
        )

    values.put(column, row, evaluated)
    return DualValueCell(formula=formula, fallback=fallback)
