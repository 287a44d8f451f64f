"""
Module: leaves

Purpose:
    Provides the LeafItem dataclass - the smallest gradable unit inside an
    outcome group. One closed tagged union covers the three leaf shapes
    (ISE task, MSE sub-question, lab experiment); consumers switch on
    `kind` or use the uniform accessors, never subclass dispatch.

Key Classes:
    - LeafKind: Tag for the leaf shape
    - LeafItem: Immutable leaf with identifier/display_label/max_marks

Key Functions:
    - LeafItem.ise(task_id, title, max_marks)
    - LeafItem.mse(task_id, question_label, max_marks)
    - LeafItem.lab(exp_no, title, max_marks)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.groups.OutcomeGroup
    - core.models.students.StudentRecord (mark keys)
    - report.layout.planner: Column planning
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from attainment_toolkit.common.numbers import format_number


class LeafKind(str, Enum):
    """Shape of a leaf assessment item."""
    ISE = "ise"  # In-semester evaluation task
    MSE = "mse"  # Mid-semester exam sub-question
    LAB = "lab"  # Lab experiment

    def __str__(self) -> str:
        return self.value


LeafIdentifier = Union[int, Tuple[int, str]]
LeafKey = Tuple[LeafKind, LeafIdentifier]


@dataclass(frozen=True, slots=True)
class LeafItem:
    """
    Leaf assessment item (immutable tagged union).

    Only the fields belonging to `kind` are meaningful:
        - ISE: task_id, title, max_marks
        - MSE: task_id, question_label, max_marks
        - LAB: exp_no, title, max_marks

    Attributes:
        kind: Leaf shape tag
        max_marks: Full point value of the leaf
        task_id: Task identifier (ISE and MSE)
        title: Task or experiment title (ISE and LAB)
        question_label: MSE sub-question label like "Q1a"
        exp_no: Experiment number (LAB)

    Invariants:
        - max_marks >= 0
        - the identifying field for `kind` is set

    Example:
        >>> leaf = LeafItem.ise(7, "ISE-1 - Quiz", 10)
        >>> leaf.identifier
        7
        >>> leaf.display_label
        'QUIZ\\n(10)'
    """

    kind: LeafKind
    max_marks: float
    task_id: Optional[int] = None
    title: str = ""
    question_label: str = ""
    exp_no: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate leaf on construction."""
        if self.max_marks < 0:
            raise ValueError(f"max_marks cannot be negative: {self.max_marks}")
        if self.kind in (LeafKind.ISE, LeafKind.MSE) and self.task_id is None:
            raise ValueError(f"{self.kind.value.upper()} leaf requires task_id")
        if self.kind == LeafKind.MSE and not self.question_label:
            raise ValueError("MSE leaf requires question_label")
        if self.kind == LeafKind.LAB and self.exp_no is None:
            raise ValueError("Lab leaf requires exp_no")

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def ise(cls, task_id: int, title: str, max_marks: float) -> LeafItem:
        """Create an ISE task leaf."""
        return cls(kind=LeafKind.ISE, max_marks=max_marks, task_id=task_id, title=title)

    @classmethod
    def mse(cls, task_id: int, question_label: str, max_marks: float) -> LeafItem:
        """Create an MSE sub-question leaf."""
        return cls(
            kind=LeafKind.MSE,
            max_marks=max_marks,
            task_id=task_id,
            question_label=question_label,
        )

    @classmethod
    def lab(cls, exp_no: int, title: str, max_marks: float) -> LeafItem:
        """Create a lab experiment leaf."""
        return cls(kind=LeafKind.LAB, max_marks=max_marks, exp_no=exp_no, title=title)

    # ─────────────────────────────────────────────────────────────────────────
    # Uniform accessors
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def identifier(self) -> LeafIdentifier:
        """
        Identifier used to look up a student's mark for this leaf.

        MSE labels repeat across papers ("Q1" on every MSE), so an MSE
        identifier is the (task_id, question_label) pair.
        """
        if self.kind == LeafKind.ISE:
            return self.task_id  # type: ignore[return-value]
        if self.kind == LeafKind.MSE:
            return (self.task_id, self.question_label)  # type: ignore[return-value]
        return self.exp_no  # type: ignore[return-value]

    @property
    def key(self) -> LeafKey:
        """Kind-qualified identifier; ISE task ids never collide with MSE ids."""
        return (self.kind, self.identifier)

    @property
    def scoped_label(self) -> str:
        """MSE mark key that stays unique when labels repeat, e.g. "3:Q1"."""
        return f"{self.task_id}:{self.question_label}"

    @property
    def short_label(self) -> str:
        """Label without the max-marks suffix."""
        if self.kind == LeafKind.ISE:
            return self.title.split("-")[-1].strip().upper()
        if self.kind == LeafKind.MSE:
            return self.question_label
        return f"EXP {self.exp_no}"

    @property
    def display_label(self) -> str:
        """Column header text, e.g. "QUIZ\\n(10)" or "EXP 3\\n(15)"."""
        return f"{self.short_label}\n({format_number(self.max_marks)})"

    @property
    def category(self) -> Optional[str]:
        """Sub-category header ("ISE"/"MSE"); lab leaves have none."""
        if self.kind == LeafKind.LAB:
            return None
        return self.kind.value.upper()
