"""
Serialization Utilities

Converts between the persistence layer's JSON shapes and the report
models, and renders an assembled ReportMatrix as JSON-ready data.

Payload shapes (keys are JSON object keys, so ids arrive as strings):

    Subject CO:  columnStructure {co: {ise: [task], mse: [question]}},
                 coList [co], students[].coMarks {co: {ise: {task_id: mark},
                 mse: {question_label: mark}}}
                 (an MSE label repeated within one CO is keyed "task_id:label")
    Lab LO:      loStructure {lo: [experiment]}, loList [lo],
                 students[].loMarks {lo: {exp_no: mark}}

Groups follow the group list; a listed group with no structure entry is
an empty group. Marks for leaves that are not in the structure are ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Union

from ..models.groups import OutcomeGroup
from ..models.leaves import LeafItem, LeafKind
from ..models.marks import ObservedMark
from ..models.payload import Allotment, ReportPayload, ReportVariant
from ..models.students import MarkKey, StudentRecord
from ..schemas.validator import ValidationError, validate_payload, variant_keys

if TYPE_CHECKING:
    from attainment_toolkit.report.matrix import ReportMatrix

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Payload Deserialization
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_payload(
    data: dict[str, Any],
    variant: Union[ReportVariant, str],
    *,
    validate: bool = True,
    strict: bool = False,
) -> ReportPayload:
    """
    Build a ReportPayload from an API response dictionary.

    Args:
        data: Dictionary from JSON
        variant: "subject-co" or "lab-lo"
        validate: Whether to validate before deserializing
        strict: Use full JSON Schema validation

    Returns:
        ReportPayload instance

    Raises:
        ValidationError: If validate=True and data is invalid
        ValueError: If data cannot be turned into valid models
    """
    variant = ReportVariant(variant)
    if validate:
        validate_payload(data, variant, strict=strict)

    list_key, structure_key, marks_key = variant_keys(variant)
    structure = data[structure_key]

    groups: List[OutcomeGroup] = []
    for group_id in data[list_key]:
        entry = structure.get(str(group_id), structure.get(group_id))
        if variant == ReportVariant.SUBJECT_CO:
            leaves = _subject_leaves(entry or {})
        else:
            leaves = _lab_leaves(entry or [])
        groups.append(OutcomeGroup(group_id=group_id, prefix=variant.group_prefix, leaves=leaves))

    students = tuple(
        _deserialize_student(s, groups, marks_key) for s in data["students"]
    )

    allotment_data = data["allotment"]
    allotment = Allotment(
        allotment_id=allotment_data["allotment_id"],
        subject_code=allotment_data["sub_id"],
        class_name=allotment_data["class_name"],
        semester=str(allotment_data["current_sem"]),
        subject_name=allotment_data.get("sub_name"),
        batch_no=allotment_data.get("batch_no"),
        all_batches=bool(allotment_data.get("all_batches", False)),
    )

    payload = ReportPayload(
        allotment=allotment,
        teacher_name=data["teacher"]["teacher_name"],
        students=students,
        groups=tuple(groups),
    )
    logger.debug(
        f"Deserialized {variant} payload: {payload.student_count} students, {len(groups)} groups"
    )
    return payload


def _subject_leaves(entry: dict[str, Any]) -> tuple[LeafItem, ...]:
    ise = [LeafItem.ise(t["task_id"], t["title"], t["max_marks"]) for t in entry.get("ise", [])]
    mse = [
        LeafItem.mse(q["task_id"], q["question_label"], q["max_marks"])
        for q in entry.get("mse", [])
    ]
    return tuple(ise + mse)


def _lab_leaves(entry: list[dict[str, Any]]) -> tuple[LeafItem, ...]:
    return tuple(LeafItem.lab(e["exp_no"], e["title"], e["max_marks"]) for e in entry)


def _lookup(mapping: dict[Any, Any], key: Any) -> Any:
    """JSON object keys are strings; in-memory dicts may use ints."""
    if key in mapping:
        return mapping[key]
    return mapping.get(str(key))


def _mark_key(group: OutcomeGroup, leaf: LeafItem) -> Union[int, str]:
    """Key of a leaf inside a student's marks for one group."""
    if leaf.kind == LeafKind.LAB:
        return leaf.exp_no  # type: ignore[return-value]
    if leaf.kind == LeafKind.ISE:
        return leaf.task_id  # type: ignore[return-value]
    repeats = sum(1 for q in group.iter_leaves(LeafKind.MSE) if q.question_label == leaf.question_label)
    return leaf.scoped_label if repeats > 1 else leaf.question_label


def _deserialize_student(
    data: dict[str, Any],
    groups: List[OutcomeGroup],
    marks_key: str,
) -> StudentRecord:
    raw_marks = data.get(marks_key) or {}
    marks: Dict[MarkKey, ObservedMark] = {}

    for group in groups:
        group_marks = _lookup(raw_marks, group.group_id)
        if not group_marks:
            continue
        for leaf in group.leaves:
            if leaf.kind != LeafKind.LAB:
                raw = _lookup(group_marks.get(leaf.kind.value) or {}, _mark_key(group, leaf))
            else:
                raw = _lookup(group_marks, _mark_key(group, leaf))
            if raw is not None:
                marks[(group.group_id, leaf.key)] = ObservedMark(raw["obtained"], raw["max"])

    return StudentRecord(
        pid=data["pid"],
        name=data["stud_name"],
        roll_no=data["roll_no"],
        marks=marks,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Payload Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_payload(payload: ReportPayload, variant: Union[ReportVariant, str]) -> dict[str, Any]:
    """
    Serialize a ReportPayload back to the API response shape.

    The output passes validate_payload() for the same variant.
    """
    variant = ReportVariant(variant)
    list_key, structure_key, marks_key = variant_keys(variant)

    structure: dict[str, Any] = {}
    for group in payload.groups:
        if variant == ReportVariant.SUBJECT_CO:
            structure[str(group.group_id)] = {
                "ise": [
                    {"task_id": leaf.task_id, "title": leaf.title, "max_marks": leaf.max_marks}
                    for leaf in group.iter_leaves(LeafKind.ISE)
                ],
                "mse": [
                    {"task_id": leaf.task_id, "question_label": leaf.question_label, "max_marks": leaf.max_marks}
                    for leaf in group.iter_leaves(LeafKind.MSE)
                ],
            }
        else:
            structure[str(group.group_id)] = [
                {"exp_no": leaf.exp_no, "title": leaf.title, "max_marks": leaf.max_marks}
                for leaf in group.leaves
            ]

    students = []
    for student in payload.students:
        marks: dict[str, Any] = {}
        for group in payload.groups:
            for leaf in group.leaves:
                mark = student.mark_for(group.group_id, leaf)
                if mark is None:
                    continue
                group_marks = marks.setdefault(str(group.group_id), {})
                if leaf.kind != LeafKind.LAB:
                    group_marks = group_marks.setdefault(leaf.kind.value, {})
                group_marks[str(_mark_key(group, leaf))] = {"obtained": mark.obtained, "max": mark.max}
        students.append({
            "pid": student.pid,
            "stud_name": student.name,
            "roll_no": student.roll_no,
            marks_key: marks,
        })

    a = payload.allotment
    allotment: dict[str, Any] = {
        "allotment_id": a.allotment_id,
        "sub_id": a.subject_code,
        "class_name": a.class_name,
        "current_sem": a.semester,
    }
    if a.subject_name is not None:
        allotment["sub_name"] = a.subject_name
    if variant == ReportVariant.LAB_LO:
        allotment["batch_no"] = a.batch_no
        allotment["all_batches"] = a.all_batches

    return {
        "allotment": allotment,
        "teacher": {"teacher_name": payload.teacher_name},
        "students": students,
        structure_key: structure,
        list_key: [g.group_id for g in payload.groups],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Matrix Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_matrix(matrix: "ReportMatrix") -> dict[str, Any]:
    """
    Serialize an assembled report to a JSON-ready dictionary.

    Formula cells carry both "formula" (with leading "=") and "fallback";
    literal cells carry "value". Absent leaf marks are flagged with
    "present": false.
    """
    m = matrix.metadata
    rows = []
    for row in matrix.rows:
        cells = []
        for cell in row.cells:
            item: dict[str, Any] = {"column": cell.column}
            if cell.is_formula:
                item["formula"] = cell.value.formula_text
                item["fallback"] = cell.value.fallback
            else:
                item["value"] = cell.value
            if not cell.present:
                item["present"] = False
            if cell.number_format:
                item["number_format"] = cell.number_format
            cells.append(item)
        rows.append({"row": row.row, "kind": row.kind.value, "cells": cells})

    return {
        "metadata": {
            "title": m.title,
            "variant": m.variant,
            "subject_code": m.subject_code,
            "subject_name": m.subject_name,
            "class_name": m.class_name,
            "semester": m.semester,
            "teacher_name": m.teacher_name,
            "target": m.target,
            "policy": m.policy.value,
            "batch_label": m.batch_label,
        },
        "width": matrix.width,
        "header_tiers": matrix.header_tiers,
        "frozen_rows": matrix.frozen_rows,
        "merges": [merge.ref for merge in matrix.merges],
        "rows": rows,
    }


# ─────────────────────────────────────────────────────────────────────────────
# File I/O
# ─────────────────────────────────────────────────────────────────────────────

def load_payload_json(
    path: Path,
    variant: Union[ReportVariant, str],
    *,
    strict: bool = False,
) -> ReportPayload:
    """
    Load and validate a payload from a JSON file.

    Raises:
        ValidationError: If the file is not valid JSON or fails validation
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {path}: {e}", path=str(path)) from e
    return deserialize_payload(data, variant, validate=True, strict=strict)


def save_matrix_json(matrix: "ReportMatrix", path: Path) -> None:
    """Save a serialized report matrix to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_matrix(matrix), f, indent=2, ensure_ascii=False)
