"""
Module: report.emission

Purpose:
    Formula construction and dual-value cell emission.

Key Functions:
    - emit(): Checked formula + fallback cell
    - banding_formula(), guarded_percent(), class_percent(), row_sum()

Used By:
    - report.assembler
"""

from .formulas import (
    Average,
    CellRange,
    Compare,
    CountAtLeast,
    Div,
    Expression,
    If,
    IfError,
    Mul,
    Number,
    Ref,
    Resolver,
    Sum,
    banding_formula,
    class_percent,
    guarded_percent,
    row_sum,
)
from .cells import DualValueCell, SheetValues, emit

__all__ = [
    # Expression tree
    "Expression",
    "Resolver",
    "Number",
    "Ref",
    "CellRange",
    "Sum",
    "Average",
    "CountAtLeast",
    "Div",
    "Mul",
    "Compare",
    "If",
    "IfError",
    # Report formulas
    "banding_formula",
    "class_percent",
    "guarded_percent",
    "row_sum",
    # Cells
    "DualValueCell",
    "SheetValues",
    "emit",
]
