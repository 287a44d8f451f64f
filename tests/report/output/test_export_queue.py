"""
Tests for Background Report Export
"""

import threading

from openpyxl import load_workbook

from attainment_toolkit.report import ExportQueue, ReportError
from attainment_toolkit.report.output import ExportResult


class TestExportQueue:
    """Tests for ExportQueue."""

    def test_submit_when_queued_then_future_resolves_to_result(self, subject_payload, tmp_path):
        with ExportQueue(max_workers=2) as queue:
            future = queue.submit(subject_payload, "subject-co", tmp_path / "co.xlsx")
            result = future.result(timeout=30)
        assert isinstance(result, ExportResult)
        assert result.path.exists()
        assert result.matrix.frozen_rows == 3
        assert load_workbook(result.path).active["G4"].value == "=SUM(D4:F4)"

    def test_wait_all_when_both_variants_then_counts_completed(self, subject_payload, lab_payload, tmp_path):
        queue = ExportQueue()
        try:
            queue.submit(subject_payload, "subject-co", tmp_path / "co.xlsx")
            queue.submit(lab_payload, "lab-lo", tmp_path / "lo.xlsx")
            assert queue.wait_all(timeout=30) == 2
        finally:
            queue.shutdown()
        assert (tmp_path / "co.xlsx").exists()
        assert (tmp_path / "lo.xlsx").exists()

    def test_wait_all_when_export_fails_then_not_counted(self, lab_payload, tmp_path):
        with ExportQueue() as queue:
            future = queue.submit(lab_payload, "subject-co", tmp_path / "bad.xlsx")
            assert queue.wait_all(timeout=30) == 0
        assert isinstance(future.exception(), ReportError)
        assert not (tmp_path / "bad.xlsx").exists()

    def test_submit_when_disabled_then_runs_synchronously(self, lab_payload, tmp_path):
        with ExportQueue() as queue:
            queue.disable()
            future = queue.submit(lab_payload, "lab-lo", tmp_path / "lo.xlsx", formulas=False)
            assert future.done()
            assert future.result().path == tmp_path / "lo.xlsx"

    def test_wait_all_when_submits_race_from_other_threads_then_every_export_counted_once(
        self, lab_payload, tmp_path
    ):
        """Exports submitted during a wait are picked up by a later wait."""
        queue = ExportQueue(max_workers=2)
        submitted = []

        def submit_batch(batch):
            for i in range(3):
                submitted.append(queue.submit(lab_payload, "lab-lo", tmp_path / f"lo-{batch}-{i}.xlsx"))

        try:
            threads = [threading.Thread(target=submit_batch, args=(b,)) for b in range(3)]
            for t in threads:
                t.start()
            completed = 0
            while any(t.is_alive() for t in threads):
                completed += queue.wait_all(timeout=30)
            for t in threads:
                t.join()
            completed += queue.wait_all(timeout=30)
        finally:
            queue.shutdown()

        assert len(submitted) == 9
        assert completed == 9
        assert len(list(tmp_path.glob("lo-*.xlsx"))) == 9
