from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from timetable_engine.models import TimetableRequest


@pytest.fixture
def root() -> Path:
    return Path(__file__).resolve().parents[1]


def _make_request(
    subjects: Sequence[str] = ("Math", "Art"),
    teachers: Sequence[int] = (2, 2),
    *,
    working_days: int = 5,
    classes_per_day: int = 4,
    constraints: Sequence[object] = (),
) -> TimetableRequest:
    return TimetableRequest(
        working_days=working_days,
        classes_per_day=classes_per_day,
        subjects=tuple(subjects),
        teachers_per_subject=tuple(teachers),
        constraints=tuple(constraints),
    )


@pytest.fixture
def make_request():
    return _make_request
