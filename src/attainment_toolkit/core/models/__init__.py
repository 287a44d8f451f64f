"""
Core Models Package

Immutable data models for the report engine's input.

All models in this package are frozen dataclasses, constructed fresh per
report request. Nothing is cached or shared across requests, so payloads
are safe to pass to worker threads.
"""

from .leaves import LeafItem, LeafKind, LeafKey
from .marks import ObservedMark
from .groups import OutcomeGroup
from .students import StudentRecord
from .payload import Allotment, ReportPayload, ReportVariant

__all__ = [
    "LeafItem",
    "LeafKind",
    "LeafKey",
    "ObservedMark",
    "OutcomeGroup",
    "StudentRecord",
    "Allotment",
    "ReportPayload",
    "ReportVariant",
]
