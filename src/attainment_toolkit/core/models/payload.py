"""
Module: payload

Purpose:
    Provides the ReportPayload dataclass - the already-shaped input handed
    to the report engine by the persistence layer - together with the
    allotment identity and the ReportVariant enum.

Key Classes:
    - ReportVariant: Subject-level CO report or lab-level LO report
    - Allotment: Subject/lab allotment identity
    - ReportPayload: Students + ordered groups for one report request

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - report.assembler: Pipeline entry point
    - core.utils.serialization: Payload (de)serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .groups import OutcomeGroup
from .leaves import LeafKind
from .students import StudentRecord


class ReportVariant(str, Enum):
    """The two symmetric report shapes."""
    SUBJECT_CO = "subject-co"  # Course Outcomes, ISE + MSE leaves
    LAB_LO = "lab-lo"          # Learning Outcomes, experiment leaves

    def __str__(self) -> str:
        return self.value

    @property
    def group_prefix(self) -> str:
        """Group label prefix ("CO" or "LO")."""
        return "CO" if self == ReportVariant.SUBJECT_CO else "LO"

    @property
    def leaf_kinds(self) -> FrozenSet[LeafKind]:
        """Leaf kinds this variant accepts."""
        if self == ReportVariant.SUBJECT_CO:
            return frozenset({LeafKind.ISE, LeafKind.MSE})
        return frozenset({LeafKind.LAB})


@dataclass(frozen=True, slots=True)
class Allotment:
    """
    Allotment identity (subject or lab assigned to a teacher for a class).

    Attributes:
        allotment_id: Allotment primary key
        subject_code: Subject/lab code like "CSC501"
        class_name: Class like "TE-CMPN-A"
        semester: Current semester label
        subject_name: Optional subject display name
        batch_no: Lab batch number (lab allotments only)
        all_batches: True when a lab report covers every batch
    """

    allotment_id: int
    subject_code: str
    class_name: str
    semester: str
    subject_name: Optional[str] = None
    batch_no: Optional[int] = None
    all_batches: bool = False

    @property
    def batch_label(self) -> str:
        """Batch label used in export file names."""
        if self.all_batches or self.batch_no is None:
            return "AllBatches"
        return f"Batch{self.batch_no}"


@dataclass(frozen=True)
class ReportPayload:
    """
    Input for one report request (immutable).

    Attributes:
        allotment: Allotment identity
        teacher_name: Teacher display name
        students: Students in input (roll) order
        groups: Outcome groups with their ordered leaves

    Invariants:
        - group ids are unique
    """

    allotment: Allotment
    teacher_name: str
    students: Tuple[StudentRecord, ...]
    groups: Tuple[OutcomeGroup, ...]

    def __post_init__(self) -> None:
        """Validate payload invariants on construction."""
        ids = [g.group_id for g in self.groups]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate outcome group ids: {ids}")

    @property
    def student_count(self) -> int:
        """Number of students in the report."""
        return len(self.students)

    @property
    def leaf_kinds(self) -> FrozenSet[LeafKind]:
        """All leaf kinds present across groups."""
        return frozenset(leaf.kind for g in self.groups for leaf in g.leaves)
