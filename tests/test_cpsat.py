from __future__ import annotations

from collections import Counter

import pytest

from timetable_engine import Cancelled, CancelToken, EngineConfig, generate_timetable
from timetable_engine.models import PreferredSlot, Teacher
from timetable_engine.models.timetable import PARTIAL_ASSIGNMENT


def test_cpsat_fills_every_slot(make_request) -> None:
    s = generate_timetable(make_request(), solver="cpsat")
    assert s.subject_counts() == Counter({"Math": 10, "Art": 10})
    assert not s.warnings


def test_cpsat_respects_teacher_capacity(make_request) -> None:
    s = generate_timetable(make_request(("Math", "Art"), (2, 1)), config=EngineConfig(solver="cpsat"))
    counts = s.subject_counts()
    assert counts["Math"] + counts["Art"] == 15
    assert counts["Art"] == 5
    assert [w.kind for w in s.warnings] == [PARTIAL_ASSIGNMENT]


def test_cpsat_honours_preference(make_request) -> None:
    req = make_request(constraints=[PreferredSlot(Teacher("Art", 1), 2, 3)])
    s = generate_timetable(req, solver="cpsat")
    assert s.grid[3][2].render() == "Art - Art-Teacher-2"


class _CancelledMidSolve(CancelToken):
    """Reads as live for the pre-solve check, cancelled from then on."""

    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    @property
    def cancelled(self) -> bool:
        self.reads += 1
        return self.reads > 1


def test_cpsat_stops_when_cancelled_during_solve(make_request) -> None:
    token = _CancelledMidSolve()
    with pytest.raises(Cancelled):
        generate_timetable(make_request(), solver="cpsat", cancel=token)
    assert token.reads >= 2
