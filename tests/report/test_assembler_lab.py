"""
Integration Tests for Lab (LO) Report Assembly

Uses the shared lab payload:
    LO1 columns D-E (EXP 1, EXP 2), F-H summary
    LO2 column I (EXP 3), J-L summary
    Students on rows 3 to 5; target 75%, no zero floor
"""

import pytest

from attainment_toolkit.core.models import ReportVariant
from attainment_toolkit.report import BandingPolicy, ReportConfig, RowKind, assemble
from attainment_toolkit.report.assembler import LAB_TITLE


@pytest.fixture
def matrix(lab_payload):
    return assemble(lab_payload, "lab-lo")


class TestLabLayout:
    """Tests for the two-tier lab layout."""

    def test_assemble_when_lab_then_two_frozen_header_rows(self, matrix):
        assert matrix.header_tiers == 2
        assert matrix.frozen_rows == 2
        assert matrix.width == 12

    def test_header_when_lab_then_experiments_sorted_and_lab_summary_labels(self, matrix):
        row = matrix.row(2)
        assert [row.cell(c).value for c in (4, 5, 9)] == ["EXP 1\n(10)", "EXP 2\n(10)", "EXP 3\n(15)"]
        assert [row.cell(c).value for c in (6, 7, 8)] == ["Marks\nobtained", "Marks\nattempted", "In\npercentage"]

    def test_merges_when_lab_then_identity_spans_two_tiers(self, matrix):
        refs = {m.ref for m in matrix.merges}
        assert {"A1:A2", "B1:B2", "C1:C2", "D1:H1", "I1:L1"} <= refs

    def test_student_rows_when_lab_then_start_after_header(self, matrix):
        assert [r.row for r in matrix.rows_of(RowKind.STUDENT)] == [3, 4, 5]
        assert matrix.cell(3, 6).value.formula == "SUM(D3:E3)"
        assert matrix.cell(3, 6).value.fallback == 17
        assert matrix.cell(3, 8).value.fallback == 85.0

    def test_student_row_when_experiment_missing_then_not_present(self, matrix):
        assert matrix.cell(4, 5).present is False
        assert matrix.cell(5, 4).present is False


class TestLabSummary:
    """Tests for the lab summary block."""

    def test_count_row_when_target_75_then_counts(self, matrix):
        row = matrix.find_row("Students scoring above 75%")
        assert row.cell(8).value.formula == 'COUNTIF(H3:H5,">=75")'
        assert row.cell(8).value.fallback == 1
        assert row.cell(12).value.fallback == 2

    def test_class_percent_when_three_students_then_rounded_fallback(self, matrix):
        row = matrix.find_row("Percentage of students")
        assert row.cell(8).value.fallback == 33.33
        assert row.cell(12).value.fallback == 66.67

    def test_attainment_when_no_zero_floor_then_levels(self, matrix):
        row = matrix.find_row("Attainment level")
        assert row.cell(8).value.formula == "IF(H9>=60,3,IF(H9>=50,2,1))"
        assert row.cell(8).value.fallback == 1
        assert row.cell(12).value.fallback == 3

    def test_legend_when_no_zero_floor_then_three_levels(self, matrix):
        legend = matrix.rows_of(RowKind.LEGEND)
        assert [r.cell(1).value for r in legend[1:]] == [3, 2, 1]

    def test_metadata_when_lab_then_title_and_batch(self, matrix):
        assert matrix.metadata.title == LAB_TITLE
        assert matrix.metadata.batch_label == "Batch2"
        assert matrix.metadata.target == 75

    def test_assemble_when_policy_overridden_then_used(self, lab_payload):
        config = ReportConfig.for_variant(
            ReportVariant.LAB_LO,
            policy=BandingPolicy.WITH_ZERO_FLOOR,
            include_legend=False,
        )
        matrix = assemble(lab_payload, "lab-lo", config)
        assert matrix.rows_of(RowKind.LEGEND) == ()
        assert matrix.metadata.policy == BandingPolicy.WITH_ZERO_FLOOR
