"""
Module: report

Purpose:
    Attainment report engine: column layout, aggregation, dual-value
    emission and assembly into a ReportMatrix.

Key Functions:
    - assemble(): Payload -> ReportMatrix
    - write_xlsx(): ReportMatrix -> .xlsx file

Key Classes:
    - ReportConfig: Variant, target and banding policy
    - ReportMatrix: Assembled report
    - ReportError, FormulaMismatchError: Assembly failures
"""

from .errors import FormulaMismatchError, ReportError
from .config import ReportConfig
from .aggregation import BandingPolicy
from .emission import DualValueCell
from .matrix import MatrixCell, MatrixRow, MergedRange, ReportMatrix, ReportMetadata, RowKind
from .assembler import assemble
from .output import ExportQueue, write_xlsx

__all__ = [
    # Errors
    "ReportError",
    "FormulaMismatchError",
    # Config
    "ReportConfig",
    "BandingPolicy",
    # Output model
    "DualValueCell",
    "MatrixCell",
    "MatrixRow",
    "MergedRange",
    "ReportMatrix",
    "ReportMetadata",
    "RowKind",
    # Pipeline
    "assemble",
    "write_xlsx",
    "ExportQueue",
]
