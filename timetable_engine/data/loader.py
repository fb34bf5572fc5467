from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List

from ..errors import ConfigError
from ..models.constraint import (
    Constraint,
    FixedBreak,
    ForbiddenSlot,
    NoDoubleBooking,
    PreferredSlot,
)
from ..models.period import WEEKDAYS, is_teaching_label
from ..models.request import TimetableRequest
from ..models.teacher import Teacher

_TEACHER_LABEL = re.compile(r"^(?P<subject>.+)-Teacher-(?P<number>\d+)$")

# camelCase as in the product's JSON contract, snake_case accepted too
_KEYS = {
    "working_days": ("workingDays", "working_days"),
    "classes_per_day": ("classesPerDay", "classes_per_day"),
    "subjects": ("subjects",),
    "teachers_per_subject": ("teachersPerSubject", "teachers_per_subject"),
    "constraints": ("constraints",),
}


def load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _pick(data: Dict[str, Any], field: str, default: Any = None) -> Any:
    for key in _KEYS[field]:
        if key in data:
            return data[key]
    return default


def parse_day(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        names = [d.lower() for d in WEEKDAYS]
        if value.strip().lower() in names:
            return names.index(value.strip().lower())
    raise ConfigError(f"expected a weekday name or ordinal, got {value!r}", "constraints")


def _parse_row(value: Any, required: bool) -> int | None:
    if value is None and not required:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ConfigError(f"expected a period row index, got {value!r}", "constraints")


def parse_teacher(item: Dict[str, Any]) -> Teacher:
    label = item.get("teacher")
    if isinstance(label, str):
        m = _TEACHER_LABEL.match(label)
        if not m or int(m.group("number")) < 1:
            raise ConfigError(f"teacher label {label!r} is not '<Subject>-Teacher-<n>'", "constraints")
        return Teacher(m.group("subject"), int(m.group("number")) - 1)
    subject = item.get("subject")
    index = item.get("teacher_index")
    if isinstance(subject, str) and isinstance(index, int) and not isinstance(index, bool):
        return Teacher(subject, index)
    raise ConfigError(f"preferred_slot needs 'teacher' or 'subject' + 'teacher_index': {item!r}", "constraints")


def constraint_from_dict(item: Dict[str, Any]) -> Constraint:
    if not isinstance(item, dict):
        raise ConfigError(f"constraint must be an object, got {item!r}", "constraints")
    kind = str(item.get("type", "")).strip().lower()
    if kind == "fixed_break":
        label = item.get("label", "Lunch")
        if not isinstance(label, str) or not label.strip() or is_teaching_label(label):
            raise ConfigError(f"break label must be non-empty and not a period name, got {label!r}", "constraints")
        return FixedBreak(_parse_row(item.get("period"), True), label)
    if kind == "forbidden_slot":
        subject = item.get("subject")
        if not isinstance(subject, str):
            raise ConfigError(f"forbidden_slot needs a subject: {item!r}", "constraints")
        return ForbiddenSlot(subject, parse_day(item.get("day")), _parse_row(item.get("period"), False))
    if kind == "preferred_slot":
        if item.get("day") is None:
            raise ConfigError(f"preferred_slot needs a day: {item!r}", "constraints")
        return PreferredSlot(parse_teacher(item), parse_day(item["day"]), _parse_row(item.get("period"), True))
    if kind == "no_double_booking":
        return NoDoubleBooking()
    raise ConfigError(f"unknown constraint type {item.get('type')!r}", "constraints")


def request_from_dict(data: Dict[str, Any]) -> TimetableRequest:
    if not isinstance(data, dict):
        raise ConfigError("request must be a JSON object", "request")
    subjects = _pick(data, "subjects", [])
    teachers = _pick(data, "teachers_per_subject", [])
    items: List[Any] = _pick(data, "constraints", []) or []
    if not isinstance(subjects, list) or not isinstance(teachers, list) or not isinstance(items, list):
        raise ConfigError("subjects, teachersPerSubject and constraints must be lists", "request")
    return TimetableRequest(
        working_days=_pick(data, "working_days"),
        classes_per_day=_pick(data, "classes_per_day"),
        subjects=tuple(subjects),
        teachers_per_subject=tuple(teachers),
        constraints=tuple(constraint_from_dict(c) for c in items),
    )


def load_request(path: Path) -> TimetableRequest:
    try:
        data = load_json(path)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: {e}", "request") from e
    return request_from_dict(data)
