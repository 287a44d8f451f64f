"""
Module: report.output.xlsx_writer

Purpose:
    Reference sink for ReportMatrix: one worksheet written with openpyxl.
    Honors merges, frozen header rows, percent number formats and the
    dual-value contract (live formulas, or fallbacks when formulas are off).

Key Functions:
    - build_workbook(): ReportMatrix -> openpyxl Workbook
    - write_xlsx(): Atomic, locked write to disk
    - default_filename(): Export file name for a report

Dependencies:
    - openpyxl: Workbook construction
    - portalocker: Cross-process exclusive lock during the write

Used By:
    - report.output.export_queue
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

import portalocker
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from attainment_toolkit.core.models import Allotment, ReportVariant

from ..matrix import ReportMatrix, RowKind

logger = logging.getLogger(__name__)

_HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
_HEADER_FONT = Font(bold=True)


def default_filename(allotment: Allotment, variant: Union[ReportVariant, str]) -> str:
    """
    Export file name.

    Example:
        >>> default_filename(allotment, "lab-lo")
        'Lab-Attainment-CSL501-Batch2.xlsx'
    """
    if ReportVariant(variant) == ReportVariant.SUBJECT_CO:
        return f"ISE-MSE-Attainment-{allotment.subject_code}.xlsx"
    return f"Lab-Attainment-{allotment.subject_code}-{allotment.batch_label}.xlsx"


def build_workbook(matrix: ReportMatrix, *, formulas: bool = True) -> Workbook:
    """
    Build a workbook holding the matrix on its active sheet.

    Args:
        matrix: Assembled report
        formulas: Write "=..." formulas; False writes fallback values only

    Returns:
        openpyxl Workbook (not yet saved)
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Attainment" if matrix.metadata.variant == ReportVariant.SUBJECT_CO.value else "Lab Attainment"
    wb.properties.title = matrix.metadata.title
    wb.properties.creator = matrix.metadata.teacher_name

    for row in matrix.rows:
        for cell in row.cells:
            if cell.is_formula and formulas:
                value = cell.value.formula_text
            else:
                value = cell.scalar
            target = ws.cell(row=row.row, column=cell.column, value=value)
            if cell.number_format:
                target.number_format = cell.number_format
            if row.kind == RowKind.HEADER:
                target.alignment = _HEADER_ALIGNMENT
                target.font = _HEADER_FONT

    for merge in matrix.merges:
        ws.merge_cells(merge.ref)

    if matrix.frozen_rows:
        ws.freeze_panes = f"A{matrix.frozen_rows + 1}"

    return wb


@contextmanager
def _export_lock(path: Path) -> Generator:
    """
    Exclusive lock on a sibling ".lock" file for the duration of a write.

    The lock file is removed before the lock is released. A waiter that
    wakes up holding a removed file reopens the path and locks again.
    """
    lock_path = path.with_name(path.name + ".lock")
    while True:
        f = open(lock_path, "a", encoding="utf-8")
        portalocker.lock(f, portalocker.LOCK_EX)
        if _is_current(f, lock_path):
            break
        portalocker.unlock(f)
        f.close()

    try:
        yield
    finally:
        try:
            lock_path.unlink()
        except OSError as e:
            # Windows refuses to delete an open file
            logger.debug(f"Lock file {lock_path.name} left in place: {e}")
        portalocker.unlock(f)
        f.close()


def _is_current(f, lock_path: Path) -> bool:
    """Whether the open lock file is still the one at lock_path."""
    try:
        return os.path.samestat(os.fstat(f.fileno()), os.stat(lock_path))
    except FileNotFoundError:
        return False


def write_xlsx(
    matrix: ReportMatrix,
    path: Union[str, Path],
    *,
    formulas: bool = True,
) -> Path:
    """
    Write a report to an .xlsx file.

    The workbook is saved to a temp file in the target directory and then
    moved into place, so readers never see a partial file.

    Args:
        matrix: Assembled report
        path: Output path
        formulas: Write live formulas (default) or fallback values

    Returns:
        The written path

    Example:
        >>> write_xlsx(assemble(payload, "subject-co"), Path("out/report.xlsx"))
        PosixPath('out/report.xlsx')
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb = build_workbook(matrix, formulas=formulas)

    with _export_lock(path):
        with tempfile.NamedTemporaryFile(
            mode="wb",
            suffix=".xlsx",
            dir=path.parent,
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            try:
                wb.save(f)
            except Exception:
                f.close()
                temp_path.unlink(missing_ok=True)
                raise

        temp_path.replace(path)

    logger.info(f"Wrote {matrix.height} rows to {path}")
    return path
