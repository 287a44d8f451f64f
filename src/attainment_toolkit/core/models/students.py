"""
Module: students

Purpose:
    Provides the StudentRecord dataclass - identity plus a sparse mapping
    from (group id, leaf key) to ObservedMark. Read-only to the engine.

Dependencies:
    - dataclasses (std)
    - .marks.ObservedMark
    - .leaves.LeafItem

Used By:
    - core.models.payload.ReportPayload
    - report.aggregation.engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from .leaves import LeafItem, LeafKey
from .marks import ObservedMark

MarkKey = Tuple[int, LeafKey]


@dataclass(frozen=True)
class StudentRecord:
    """
    A student and their graded marks.

    Attributes:
        pid: Student PID
        name: Student name
        roll_no: Roll number
        marks: Sparse mapping (group_id, leaf.key) -> ObservedMark

    Example:
        >>> leaf = LeafItem.ise(1, "Quiz", 10)
        >>> s = StudentRecord(101, "Asha", 1, {(1, leaf.key): ObservedMark(8, 10)})
        >>> s.mark_for(1, leaf)
        ObservedMark(8/10)
    """

    pid: int
    name: str
    roll_no: Union[int, str]
    marks: Mapping[MarkKey, ObservedMark] = field(default_factory=dict)

    def mark_for(self, group_id: int, leaf: LeafItem) -> Optional[ObservedMark]:
        """Observed mark for a leaf in a group, or None when ungraded."""
        return self.marks.get((group_id, leaf.key))

    def has_mark(self, group_id: int, leaf: LeafItem) -> bool:
        """Whether the student has a graded submission for the leaf."""
        return (group_id, leaf.key) in self.marks
