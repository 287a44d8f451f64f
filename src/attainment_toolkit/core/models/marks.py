"""
Module: marks

Purpose:
    Provides the ObservedMark dataclass - a student's graded result for one
    leaf item. Absence of an ObservedMark is a first-class sparse state
    (ungraded); aggregation treats it as contributing 0 to "obtained".

Key Functions:
    - ObservedMark.of(obtained, max): Create a mark
    - ObservedMark.obtained_or_zero(mark): Sparse-aware obtained value

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.students.StudentRecord
    - report.aggregation.engine
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ObservedMark:
    """
    Graded result for one (group, leaf) pair.

    Attributes:
        obtained: Marks awarded
        max: Maximum marks the submission was graded out of

    Invariants:
        - obtained >= 0
        - max >= 0

    Example:
        >>> m = ObservedMark(8, 10)
        >>> m.obtained
        8
    """

    obtained: float
    max: float

    def __post_init__(self) -> None:
        """Validate mark on construction."""
        if self.obtained < 0:
            raise ValueError(f"Obtained marks cannot be negative: {self.obtained}")
        if self.max < 0:
            raise ValueError(f"Max marks cannot be negative: {self.max}")

    @classmethod
    def of(cls, obtained: float, max: float) -> ObservedMark:
        """Create a mark from obtained/max values."""
        return cls(obtained=obtained, max=max)

    @staticmethod
    def obtained_or_zero(mark: Optional[ObservedMark]) -> float:
        """Obtained value, or 0 when the leaf is ungraded."""
        return mark.obtained if mark is not None else 0

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"ObservedMark({self.obtained}/{self.max})"
