"""
Payload Schema Validation

Validates report payloads (the persistence layer's API response shapes)
before they are turned into models. The report engine itself assumes a
well-typed payload; callers run these checks first.

Two levels:
- Basic checks (default): required keys and group list shape
- Strict: full JSON Schema validation with jsonschema
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import jsonschema

from ..models.payload import ReportVariant

_SCHEMAS: dict[str, dict] = {}

_SCHEMA_NAMES = {
    ReportVariant.SUBJECT_CO: "subject_report",
    ReportVariant.LAB_LO: "lab_report",
}

# (group list key, structure key, per-student marks key)
_VARIANT_KEYS = {
    ReportVariant.SUBJECT_CO: ("coList", "columnStructure", "coMarks"),
    ReportVariant.LAB_LO: ("loList", "loStructure", "loMarks"),
}


def variant_keys(variant: Union[ReportVariant, str]) -> tuple[str, str, str]:
    """Payload keys for a variant: (group list, structure, student marks)."""
    return _VARIANT_KEYS[ReportVariant(variant)]


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when a payload fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_payload(
    data: dict[str, Any],
    variant: Union[ReportVariant, str],
    *,
    strict: bool = False,
) -> None:
    """
    Validate a report payload.

    Args:
        data: Payload dictionary (API response shape)
        variant: "subject-co" or "lab-lo"
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Payload must be an object, got {type(data).__name__}")

    variant = ReportVariant(variant)
    list_key, structure_key, _ = variant_keys(variant)

    required = ["allotment", "teacher", "students", structure_key, list_key]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    allotment = data["allotment"]
    if not isinstance(allotment, dict):
        raise ValidationError("allotment must be an object", path="allotment")
    missing = [f for f in ("allotment_id", "sub_id", "class_name", "current_sem") if f not in allotment]
    if missing:
        raise ValidationError(
            f"Allotment missing required fields: {missing}",
            path="allotment",
            errors=[f"Missing field: {f}" for f in missing]
        )

    if not isinstance(data["teacher"], dict) or "teacher_name" not in data["teacher"]:
        raise ValidationError("teacher must have teacher_name", path="teacher")

    group_ids = data[list_key]
    if not isinstance(group_ids, list):
        raise ValidationError(f"{list_key} must be a list", path=list_key)
    for i, group_id in enumerate(group_ids):
        if not isinstance(group_id, int) or isinstance(group_id, bool) or group_id <= 0:
            raise ValidationError(
                f"Invalid group id: {group_id!r} (must be a positive integer)",
                path=f"{list_key}[{i}]"
            )
    if len(set(group_ids)) != len(group_ids):
        raise ValidationError(f"Duplicate group ids in {list_key}: {group_ids}", path=list_key)

    if not isinstance(data[structure_key], dict):
        raise ValidationError(f"{structure_key} must be an object", path=structure_key)

    students = data["students"]
    if not isinstance(students, list):
        raise ValidationError("students must be a list", path="students")
    for i, student in enumerate(students):
        _validate_student(student, f"students[{i}]")

    if strict:
        schema = _load_schema(_SCHEMA_NAMES[variant])
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message]
            ) from e


def _validate_student(data: Any, path: str) -> None:
    """Validate a student entry."""
    if not isinstance(data, dict):
        raise ValidationError("student must be an object", path=path)
    missing = [f for f in ("pid", "stud_name", "roll_no") if f not in data]
    if missing:
        raise ValidationError(
            f"Student missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing]
        )
