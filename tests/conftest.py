import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import attainment_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from attainment_toolkit.core.models import (  # noqa: E402
    Allotment,
    LeafItem,
    ObservedMark,
    OutcomeGroup,
    ReportPayload,
    StudentRecord,
)


def make_student(pid, marks=None, name=None, roll_no=None):
    """Student with marks given as {(group_id, leaf): (obtained, max)}."""
    marks = marks or {}
    return StudentRecord(
        pid=pid,
        name=name or f"Student {pid}",
        roll_no=roll_no if roll_no is not None else pid,
        marks={(g, leaf.key): ObservedMark(o, m) for (g, leaf), (o, m) in marks.items()},
    )


# Common test fixtures
@pytest.fixture
def subject_allotment():
    return Allotment(allotment_id=11, subject_code="CSC501", class_name="TE-CMPN-A", semester="5")


@pytest.fixture
def lab_allotment():
    return Allotment(
        allotment_id=12,
        subject_code="CSL501",
        class_name="TE-CMPN-A",
        semester="5",
        batch_no=2,
    )


@pytest.fixture
def quiz_leaves():
    """Two ISE leaves of max 10 each."""
    return (LeafItem.ise(1, "ISE-1 - Quiz", 10), LeafItem.ise(2, "ISE-2 - Assignment", 10))


@pytest.fixture
def subject_payload(subject_allotment, quiz_leaves):
    """
    CO1: two ISE leaves (10 + 10) and one MSE question (20).
    CO2: one ISE leaf (10).

    Student 101 scores 8, 6, 16 on CO1 and 9 on CO2.
    Student 102 has only the first quiz (5) on CO1 and nothing on CO2.
    """
    quiz, assignment = quiz_leaves
    q1 = LeafItem.mse(3, "Q1a", 20)
    co2_quiz = LeafItem.ise(4, "ISE-3 - Presentation", 10)
    co1 = OutcomeGroup(1, "CO", (quiz, assignment, q1))
    co2 = OutcomeGroup(2, "CO", (co2_quiz,))
    students = (
        make_student(101, {
            (1, quiz): (8, 10),
            (1, assignment): (6, 10),
            (1, q1): (16, 20),
            (2, co2_quiz): (9, 10),
        }),
        make_student(102, {(1, quiz): (5, 10)}),
    )
    return ReportPayload(
        allotment=subject_allotment,
        teacher_name="Prof. Rao",
        students=students,
        groups=(co2, co1),
    )


@pytest.fixture
def lab_payload(lab_allotment):
    """
    LO1: experiments 2 and 1 (given out of order), 10 marks each.
    LO2: experiment 3, 15 marks.
    """
    exp1 = LeafItem.lab(1, "Linked lists", 10)
    exp2 = LeafItem.lab(2, "Stacks", 10)
    exp3 = LeafItem.lab(3, "Queues", 15)
    lo1 = OutcomeGroup(1, "LO", (exp2, exp1))
    lo2 = OutcomeGroup(2, "LO", (exp3,))
    students = (
        make_student(201, {(1, exp1): (9, 10), (1, exp2): (8, 10), (2, exp3): (12, 15)}),
        make_student(202, {(1, exp1): (7, 10), (2, exp3): (15, 15)}),
        make_student(203, {}),
    )
    return ReportPayload(
        allotment=lab_allotment,
        teacher_name="Prof. Iyer",
        students=students,
        groups=(lo1, lo2),
    )


@pytest.fixture
def student_factory():
    """make_student as a fixture."""
    return make_student
