from __future__ import annotations

import pytest

from timetable_engine.data.registry import ConstraintRegistry, OccupancyLedger, SubjectQuotas
from timetable_engine.errors import ConfigError, ConstraintConflict
from timetable_engine.generate import prepare
from timetable_engine.models import FixedBreak, ForbiddenSlot, NoDoubleBooking, PreferredSlot, Slot, Teacher


def test_forbidden_lookup_with_wildcards() -> None:
    reg = ConstraintRegistry(
        [ForbiddenSlot("Math", 4, 1), ForbiddenSlot("Art", 0), ForbiddenSlot("Music", None, 3)],
        ["Math", "Art", "Music"],
    )
    assert reg.is_forbidden("Math", 4, 1)
    assert not reg.is_forbidden("Math", 4, 0)
    assert all(reg.is_forbidden("Art", 0, p) for p in range(6))
    assert not reg.is_forbidden("Art", 1, 0)
    assert all(reg.is_forbidden("Music", d, 3) for d in range(5))


def test_preferred_lookup() -> None:
    t = Teacher("Math", 1)
    reg = ConstraintRegistry([PreferredSlot(t, 2, 0)], ["Math"])
    assert reg.is_preferred(t, 2, 0)
    assert not reg.is_preferred(Teacher("Math", 0), 2, 0)
    assert reg.has_pending_preference(t, 2, -1)
    assert not reg.has_pending_preference(t, 2, 0)


def test_breaks_are_indexed_and_duplicates_collapse() -> None:
    reg = ConstraintRegistry(
        [FixedBreak(3, "Lunch"), FixedBreak(3, "Lunch"), FixedBreak(1, "Break"), NoDoubleBooking()],
        ["Math"],
    )
    assert reg.break_rows() == [1, 3]
    assert reg.break_label(3) == "Lunch"
    assert reg.break_label(0) is None


def test_two_labels_for_one_break_row_conflict() -> None:
    with pytest.raises(ConstraintConflict):
        ConstraintRegistry([FixedBreak(3, "Lunch"), FixedBreak(3, "Assembly")], ["Math"])


def test_unknown_subject_rejected() -> None:
    with pytest.raises(ConfigError):
        ConstraintRegistry([ForbiddenSlot("History", 0, 0)], ["Math"])


def test_forbidden_slot_on_break_row_conflicts(make_request) -> None:
    req = make_request(constraints=[FixedBreak(2, "Lunch"), ForbiddenSlot("Math", 0, 2)])
    with pytest.raises(ConstraintConflict):
        prepare(req)


def test_preferred_slot_on_forbidden_slot_conflicts(make_request) -> None:
    req = make_request(
        constraints=[ForbiddenSlot("Math", 1, 0), PreferredSlot(Teacher("Math", 0), 1, 0)]
    )
    with pytest.raises(ConstraintConflict):
        prepare(req)


def test_preferred_teacher_outside_pool(make_request) -> None:
    req = make_request(constraints=[PreferredSlot(Teacher("Art", 5), 0, 0)])
    with pytest.raises(ConfigError):
        prepare(req)


def test_constraint_day_out_of_range(make_request) -> None:
    req = make_request(working_days=3, constraints=[ForbiddenSlot("Math", 4, 0)])
    with pytest.raises(ConfigError):
        prepare(req)


def test_targets_split_evenly_with_round_robin_remainder() -> None:
    quotas = SubjectQuotas(["A", "B", "C"], [1, 1, 1])
    assert quotas.targets(20, [True, True, True]) == {"A": 7, "B": 7, "C": 6}
    assert quotas.targets(20, [True, False, True]) == {"A": 10, "B": 0, "C": 10}
    assert quotas.targets(20, [False, False, False]) == {"A": 0, "B": 0, "C": 0}


def test_targets_respect_capacity() -> None:
    quotas = SubjectQuotas(["A", "B", "C"], [1, 1, 1])
    targets = quotas.targets(20, [True, True, True], {"A": 2, "B": 20, "C": 20})
    assert targets == {"A": 2, "B": 10, "C": 8}
    assert sum(targets.values()) == 20


def test_capacity_counts_teachers_and_allowed_slots_per_day(make_request) -> None:
    req = make_request(
        ("Math", "Art", "Music"),
        (2, 1, 3),
        working_days=2,
        constraints=[ForbiddenSlot("Math", 0), ForbiddenSlot("Music", None, 0)],
    )
    plan = prepare(req)
    quotas = SubjectQuotas(req.subjects, req.teachers_per_subject)
    assert quotas.capacities(plan.registry, plan.slots) == {"Math": 2, "Art": 2, "Music": 6}
    assert {s.name: s.target for s in plan.subjects} == {"Math": 2, "Art": 2, "Music": 4}


def test_unstaffed_subject_gets_no_target(make_request) -> None:
    plan = prepare(make_request(("Math", "Art", "Music"), (2, 0, 1)))
    targets = {s.name: s.target for s in plan.subjects}
    assert targets == {"Math": 10, "Art": 0, "Music": 5}
    assert plan.schedulable == [True, False, True]


def test_ledger_tracks_teachers_per_day() -> None:
    ledger = OccupancyLedger()
    ledger.place("Math", 0, Slot(0, 1))
    assert not ledger.teacher_free("Math", 0, 1)
    assert ledger.teacher_free("Math", 0, 2)
    assert ledger.teacher_free("Math", 1, 1)
    assert not ledger.can_place("Art", 0, Slot(0, 1))
    assert ledger.day_counts[("Math", 1)] == 1
    ledger.remove("Math", 0, Slot(0, 1))
    assert ledger.teacher_free("Math", 0, 1)
    assert ledger.subject_counts["Math"] == 0
