"""
Attainment Toolkit Core Package

Shared data models, payload schemas and serialization helpers. These
models are the single source of truth for every report module.
"""

from .models import (
    Allotment,
    LeafItem,
    LeafKind,
    ObservedMark,
    OutcomeGroup,
    ReportPayload,
    ReportVariant,
    StudentRecord,
)

__all__ = [
    "Allotment",
    "LeafItem",
    "LeafKind",
    "ObservedMark",
    "OutcomeGroup",
    "ReportPayload",
    "ReportVariant",
    "StudentRecord",
]
