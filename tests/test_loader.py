from __future__ import annotations

import json
from pathlib import Path

import pytest

from timetable_engine.data.loader import constraint_from_dict, load_request, request_from_dict
from timetable_engine.errors import ConfigError
from timetable_engine.models import FixedBreak, ForbiddenSlot, NoDoubleBooking, PreferredSlot, Teacher


def test_sample_request_loads(root: Path) -> None:
    req = load_request(root / "data" / "request.json")
    assert req.working_days == 5
    assert req.classes_per_day == 6
    assert req.subjects == ("Math", "English", "Science", "Art")
    assert req.teachers_per_subject == (2, 2, 2, 1)
    assert req.constraints == (
        FixedBreak(3, "Lunch"),
        ForbiddenSlot("Math", 4, 5),
        ForbiddenSlot("Art", 0, None),
        PreferredSlot(Teacher("Science", 0), 1, 0),
        NoDoubleBooking(),
    )


def test_snake_case_keys_accepted() -> None:
    req = request_from_dict(
        {"working_days": 3, "classes_per_day": 2, "subjects": ["Math"], "teachers_per_subject": [1]}
    )
    assert (req.working_days, req.classes_per_day, req.constraints) == (3, 2, ())


def test_teacher_by_subject_and_index() -> None:
    c = constraint_from_dict({"type": "preferred_slot", "subject": "Art", "teacher_index": 1, "day": 2, "period": 0})
    assert c == PreferredSlot(Teacher("Art", 1), 2, 0)
    assert c.teacher.label == "Art-Teacher-2"


@pytest.mark.parametrize(
    "item",
    [
        {"type": "recess"},
        {"type": "forbidden_slot", "day": 0},
        {"type": "forbidden_slot", "subject": "Math", "day": "Funday"},
        {"type": "preferred_slot", "teacher": "Math-Teacher-1", "period": 0},
        {"type": "preferred_slot", "teacher": "Math-Teacher-0", "day": 0, "period": 0},
        {"type": "fixed_break", "label": "Lunch"},
        {"type": "fixed_break", "period": 2, "label": ""},
        {"type": "fixed_break", "period": 2, "label": "Period 9"},
    ],
)
def test_bad_constraints_rejected(item: dict) -> None:
    with pytest.raises(ConfigError):
        constraint_from_dict(item)


def test_malformed_json_is_a_config_error(tmp_path: Path) -> None:
    path = tmp_path / "request.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_request(path)


def test_lists_required(tmp_path: Path) -> None:
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"workingDays": 5, "classesPerDay": 4, "subjects": "Math"}), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_request(path)


def test_request_validation() -> None:
    base = {"workingDays": 5, "classesPerDay": 4, "subjects": ["Math", "Art"], "teachersPerSubject": [1, 1]}
    request_from_dict(base).validate()
    for bad in (
        {"workingDays": 8},
        {"classesPerDay": 0},
        {"subjects": []},
        {"subjects": ["Math", "Math"]},
        {"teachersPerSubject": [1]},
        {"teachersPerSubject": [1, -1]},
        {"workingDays": True},
    ):
        with pytest.raises(ConfigError):
            request_from_dict({**base, **bad}).validate()
