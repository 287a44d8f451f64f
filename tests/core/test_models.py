"""
Unit Tests for Core Models

Tests for LeafItem, ObservedMark, OutcomeGroup, StudentRecord and
ReportPayload construction and accessors.
"""

import pytest

from attainment_toolkit.core.models import (
    Allotment,
    LeafItem,
    LeafKind,
    ObservedMark,
    OutcomeGroup,
    ReportPayload,
    ReportVariant,
    StudentRecord,
)


class TestLeafItem:
    """Tests for the LeafItem tagged union."""

    # ─────────────────────────────────────────────────────────────────────────
    # Constructor Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_init_when_negative_max_marks_then_raises_error(self):
        """Negative max marks should raise ValueError."""
        with pytest.raises(ValueError, match="max_marks cannot be negative"):
            LeafItem.ise(1, "Quiz", -1)

    def test_init_when_mse_without_label_then_raises_error(self):
        with pytest.raises(ValueError, match="question_label"):
            LeafItem(kind=LeafKind.MSE, max_marks=5, task_id=3)

    def test_init_when_lab_without_exp_no_then_raises_error(self):
        with pytest.raises(ValueError, match="exp_no"):
            LeafItem(kind=LeafKind.LAB, max_marks=5)

    # ─────────────────────────────────────────────────────────────────────────
    # Accessor Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_identifier_when_each_kind_then_returns_identifying_field(self):
        """ISE -> task id, MSE -> question label, lab -> experiment number."""
        assert LeafItem.ise(7, "Quiz", 10).identifier == 7
        assert LeafItem.mse(3, "Q1a", 5).identifier == (3, "Q1a")
        assert LeafItem.lab(4, "Sorting", 15).identifier == 4

    def test_display_label_when_ise_title_has_dashes_then_uses_last_segment(self):
        """ISE label is the last dash segment, upper-cased, with max marks."""
        leaf = LeafItem.ise(1, "ISE-1 - Class Quiz", 10)
        assert leaf.display_label == "CLASS QUIZ\n(10)"

    def test_display_label_when_mse_then_label_and_max(self):
        assert LeafItem.mse(3, "Q2b", 7.5).display_label == "Q2b\n(7.5)"

    def test_display_label_when_lab_then_experiment_number(self):
        assert LeafItem.lab(3, "Queues", 15).display_label == "EXP 3\n(15)"

    def test_key_when_ise_and_mse_share_identifier_text_then_keys_differ(self):
        """Kind-qualified keys keep ISE and MSE lookups apart."""
        ise = LeafItem.ise(1, "Quiz", 10)
        mse = LeafItem.mse(1, "1", 10)
        assert ise.key != mse.key

    def test_key_when_mse_label_repeats_across_tasks_then_keys_differ(self):
        """Q1 of one MSE paper is not Q1 of another."""
        first = LeafItem.mse(3, "Q1", 10)
        second = LeafItem.mse(5, "Q1", 10)
        assert first.key != second.key
        assert second.scoped_label == "5:Q1"

    def test_category_when_lab_then_none(self):
        assert LeafItem.ise(1, "Quiz", 10).category == "ISE"
        assert LeafItem.mse(1, "Q1", 10).category == "MSE"
        assert LeafItem.lab(1, "Exp", 10).category is None


class TestObservedMark:
    """Tests for ObservedMark."""

    def test_init_when_negative_obtained_then_raises_error(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            ObservedMark(-1, 10)

    def test_obtained_or_zero_when_absent_then_zero(self):
        """Absent marks contribute 0."""
        assert ObservedMark.obtained_or_zero(None) == 0
        assert ObservedMark.obtained_or_zero(ObservedMark(4, 5)) == 4


class TestOutcomeGroup:
    """Tests for OutcomeGroup."""

    def test_init_when_non_positive_id_then_raises_error(self):
        with pytest.raises(ValueError, match="group_id must be positive"):
            OutcomeGroup(0, "CO")

    def test_init_when_mse_before_ise_then_raises_error(self):
        """ISE leaves must precede MSE leaves."""
        with pytest.raises(ValueError, match="ISE leaves must precede MSE leaves"):
            OutcomeGroup(1, "CO", (LeafItem.mse(1, "Q1", 5), LeafItem.ise(2, "Quiz", 5)))

    def test_init_when_lab_mixed_with_ise_then_raises_error(self):
        with pytest.raises(ValueError, match="mixes lab leaves"):
            OutcomeGroup(1, "CO", (LeafItem.ise(1, "Quiz", 5), LeafItem.lab(1, "Exp", 5)))

    def test_init_when_duplicate_leaf_then_raises_error(self):
        with pytest.raises(ValueError, match="duplicate leaf"):
            OutcomeGroup(1, "CO", (LeafItem.mse(3, "Q1", 5), LeafItem.mse(3, "Q1", 5)))

    def test_init_when_same_label_from_two_mse_tasks_then_accepted(self):
        group = OutcomeGroup(1, "CO", (LeafItem.mse(3, "Q1", 10), LeafItem.mse(5, "Q1", 10)))
        assert group.total_max_marks == 20

    def test_total_max_marks_when_leaves_then_sums_max(self, quiz_leaves):
        group = OutcomeGroup(1, "CO", quiz_leaves)
        assert group.label == "CO1"
        assert group.total_max_marks == 20

    def test_is_empty_when_no_leaves_then_true(self):
        group = OutcomeGroup(4, "LO")
        assert group.is_empty
        assert group.total_max_marks == 0


class TestStudentRecord:
    """Tests for StudentRecord mark lookup."""

    def test_mark_for_when_graded_then_returns_mark(self, quiz_leaves, student_factory):
        quiz, assignment = quiz_leaves
        student = student_factory(101, {(1, quiz): (8, 10)})
        assert student.mark_for(1, quiz) == ObservedMark(8, 10)
        assert student.has_mark(1, quiz)

    def test_mark_for_when_ungraded_then_none(self, quiz_leaves, student_factory):
        quiz, assignment = quiz_leaves
        student = student_factory(101, {(1, quiz): (8, 10)})
        assert student.mark_for(1, assignment) is None
        assert student.mark_for(2, quiz) is None


class TestReportPayload:
    """Tests for ReportPayload and ReportVariant."""

    def test_init_when_duplicate_group_ids_then_raises_error(self, subject_allotment):
        with pytest.raises(ValueError, match="Duplicate outcome group ids"):
            ReportPayload(
                allotment=subject_allotment,
                teacher_name="T",
                students=(),
                groups=(OutcomeGroup(1, "CO"), OutcomeGroup(1, "CO")),
            )

    def test_leaf_kinds_when_subject_payload_then_ise_and_mse(self, subject_payload):
        assert subject_payload.leaf_kinds == {LeafKind.ISE, LeafKind.MSE}
        assert subject_payload.student_count == 2

    def test_variant_when_parsed_from_string_then_has_prefix(self):
        assert ReportVariant("subject-co").group_prefix == "CO"
        assert ReportVariant("lab-lo").group_prefix == "LO"
        assert ReportVariant.LAB_LO.leaf_kinds == {LeafKind.LAB}

    def test_batch_label_when_all_batches_then_all_batches(self):
        a = Allotment(1, "CSL501", "TE", "5", batch_no=2, all_batches=True)
        assert a.batch_label == "AllBatches"
        assert Allotment(1, "CSL501", "TE", "5", batch_no=2).batch_label == "Batch2"
