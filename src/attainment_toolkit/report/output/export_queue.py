"""
Module: report.output.export_queue

Purpose:
    Background report export. Assembly and the workbook write run on a
    thread pool so a caller (UI or request handler) is never blocked.
    Only the payload and the output path cross into the worker; the
    worker builds everything else fresh.

Key Classes:
    - ExportQueue: Thread pool-based export queue
    - ExportResult: Written path plus the assembled matrix

Dependencies:
    - concurrent.futures: Thread pool execution
    - threading: Guards the pending-export list

Used By:
    - External callers exporting reports
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from attainment_toolkit.core.models import ReportPayload, ReportVariant

from ..assembler import assemble
from ..config import ReportConfig
from ..matrix import ReportMatrix
from .xlsx_writer import write_xlsx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """A finished export."""
    path: Path
    matrix: ReportMatrix


class ExportQueue:
    """
    Thread pool-based export queue.

    Usage:
        with ExportQueue(max_workers=2) as queue:
            future = queue.submit(payload, "subject-co", Path("out/co.xlsx"))
            result = future.result()

    Attributes:
        max_workers: Maximum concurrent exports.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="report-export")
        self._futures: List[Future] = []
        self._futures_lock = threading.Lock()
        self._enabled = True

    def submit(
        self,
        payload: ReportPayload,
        variant: Union[ReportVariant, str],
        path: Union[str, Path],
        config: Optional[ReportConfig] = None,
        *,
        formulas: bool = True,
    ) -> Future:
        """
        Queue an export.

        Returns:
            Future resolving to an ExportResult. When the queue is disabled
            the export runs immediately and the future is already done.
        """
        if not self._enabled:
            future: Future = Future()
            try:
                future.set_result(export_report(payload, variant, path, config, formulas=formulas))
            except Exception as e:
                future.set_exception(e)
            return future

        future = self._executor.submit(export_report, payload, variant, path, config, formulas=formulas)
        with self._futures_lock:
            self._futures.append(future)
        return future

    def wait_all(self, timeout: Optional[float] = None) -> int:
        """
        Wait for all queued exports to complete.

        Exports submitted while waiting are left for the next call.

        Args:
            timeout: Max seconds to wait per export (None = indefinite).

        Returns:
            Number of successful exports.
        """
        with self._futures_lock:
            pending, self._futures = self._futures, []

        completed = 0
        for future in pending:
            try:
                future.result(timeout=timeout)
                completed += 1
            except Exception as e:
                logger.error(f"Export failed: {e}")
        return completed

    def shutdown(self) -> None:
        """Wait for pending exports and shut down the pool."""
        self.wait_all()
        self._executor.shutdown(wait=True)

    def disable(self) -> None:
        """Run exports synchronously on the caller's thread."""
        self._enabled = False

    def __enter__(self) -> "ExportQueue":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()


def export_report(
    payload: ReportPayload,
    variant: Union[ReportVariant, str],
    path: Union[str, Path],
    config: Optional[ReportConfig] = None,
    *,
    formulas: bool = True,
) -> ExportResult:
    """Assemble and write one report synchronously."""
    matrix = assemble(payload, variant, config)
    written = write_xlsx(matrix, path, formulas=formulas)
    return ExportResult(path=written, matrix=matrix)
