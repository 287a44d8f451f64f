"""
Module: report.output

Purpose:
    Writing assembled reports to disk.

Key Functions:
    - write_xlsx(): Atomic .xlsx write (openpyxl + portalocker)
    - export_report(): Assemble + write

Key Classes:
    - ExportQueue: Background exports on a thread pool
"""

from .xlsx_writer import build_workbook, default_filename, write_xlsx
from .export_queue import ExportQueue, ExportResult, export_report

__all__ = [
    "build_workbook",
    "default_filename",
    "write_xlsx",
    "ExportQueue",
    "ExportResult",
    "export_report",
]
