from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from ..errors import ConfigError, ConstraintConflict
from ..models.constraint import (
    Constraint,
    FixedBreak,
    ForbiddenSlot,
    NoDoubleBooking,
    PreferredSlot,
)
from ..models.period import Day, Period, Slot
from ..models.subject import Subject
from ..models.teacher import Teacher

# (subject, day or None, period or None)
ForbiddenKey = Tuple[str, int | None, int | None]


class ConstraintRegistry:
    """Indexes structured constraints for constant-time lookups during search."""

    def __init__(self, constraints: Iterable[Constraint], subjects: Sequence[str]):
        logger = logging.getLogger(__name__)
        self.subjects: List[str] = list(subjects)
        self.breaks: Dict[int, FixedBreak] = {}
        self.forbidden: Dict[ForbiddenKey, ForbiddenSlot] = {}
        self.preferred: Dict[Tuple[Teacher, int, int], PreferredSlot] = {}
        # teacher -> {(day, period)}
        self.preferences_by_teacher: Dict[Teacher, Set[Tuple[int, int]]] = {}
        self.days: List[Day] = []
        self.periods: List[Period] = []

        known = set(self.subjects)
        for c in constraints:
            if isinstance(c, FixedBreak):
                other = self.breaks.get(c.period_index)
                if other is not None and other.label != c.label:
                    raise ConstraintConflict(other, c, f"row {c.period_index} has two break labels")
                self.breaks[c.period_index] = c
            elif isinstance(c, ForbiddenSlot):
                if c.subject not in known:
                    raise ConfigError(f"unknown subject {c.subject!r} in {c!r}", "constraints")
                self.forbidden[(c.subject, c.day, c.period)] = c
            elif isinstance(c, PreferredSlot):
                if c.teacher.subject not in known:
                    raise ConfigError(f"unknown subject {c.teacher.subject!r} in {c!r}", "constraints")
                self.preferred[(c.teacher, c.day, c.period)] = c
                self.preferences_by_teacher.setdefault(c.teacher, set()).add((c.day, c.period))
            elif isinstance(c, NoDoubleBooking):
                continue  # structural, always enforced
            else:
                raise ConfigError(f"unsupported constraint {c!r}", "constraints")
        logger.debug(
            f"Registry: {len(self.breaks)} breaks, {len(self.forbidden)} forbidden, "
            f"{len(self.preferred)} preferred"
        )

    def bind(self, days: List[Day], periods: List[Period], teachers: Sequence[int]) -> None:
        """Check constraint coordinates against the planned grid."""
        self.days = list(days)
        self.periods = list(periods)
        pool = dict(zip(self.subjects, teachers))
        for (subject, day, period), c in self.forbidden.items():
            self._check_coordinates(c, day, period)
            if period is not None and self.periods[period].is_break:
                raise ConstraintConflict(
                    self.breaks.get(period, self.periods[period].label), c, "forbidden slot on a break row"
                )
        for (teacher, day, period), c in self.preferred.items():
            self._check_coordinates(c, day, period)
            if not 0 <= teacher.index < pool[teacher.subject]:
                raise ConfigError(
                    f"{teacher.label} outside a pool of {pool[teacher.subject]}", "constraints"
                )
            if self.periods[period].is_break:
                raise ConstraintConflict(
                    self.breaks.get(period, self.periods[period].label), c, "preferred slot on a break row"
                )
            if self.is_forbidden(teacher.subject, day, period):
                blocking = self._forbidding(teacher.subject, day, period)
                raise ConstraintConflict(blocking, c, "preferred slot is forbidden for its subject")

    def _check_coordinates(self, c: Constraint, day: int | None, period: int | None) -> None:
        if day is not None and not 0 <= day < len(self.days):
            raise ConfigError(f"day {day} out of range in {c!r}", "constraints")
        if period is not None and not 0 <= period < len(self.periods):
            raise ConfigError(f"period {period} out of range in {c!r}", "constraints")

    def _forbidding(self, subject: str, day: int, period: int) -> ForbiddenSlot | None:
        for key in ((subject, day, period), (subject, day, None), (subject, None, period), (subject, None, None)):
            c = self.forbidden.get(key)
            if c is not None:
                return c
        return None

    def is_forbidden(self, subject: str, day: int, period: int) -> bool:
        return self._forbidding(subject, day, period) is not None

    def is_preferred(self, teacher: Teacher, day: int, period: int) -> bool:
        return (teacher, day, period) in self.preferred

    def has_pending_preference(self, teacher: Teacher, day: int, after_period: int) -> bool:
        return any(d == day and p > after_period for d, p in self.preferences_by_teacher.get(teacher, ()))

    def break_rows(self) -> List[int]:
        return sorted(self.breaks)

    def break_label(self, row: int) -> str | None:
        b = self.breaks.get(row)
        return b.label if b else None

    def fixed_breaks(self) -> List[FixedBreak]:
        return [self.breaks[r] for r in self.break_rows()]

    def allowed_subjects(self, subjects: Sequence[Subject], day: int, period: int) -> List[Subject]:
        return [s for s in subjects if s.staffed and not self.is_forbidden(s.name, day, period)]


class SubjectQuotas:
    def __init__(self, names: Sequence[str], teachers: Sequence[int]):
        self.names = list(names)
        self.teachers = list(teachers)

    def schedulable(self, registry: ConstraintRegistry, teaching: List[Slot]) -> List[bool]:
        out: List[bool] = []
        for name, count in zip(self.names, self.teachers):
            ok = count > 0 and any(not registry.is_forbidden(name, s.day, s.period) for s in teaching)
            out.append(ok)
        return out

    def capacities(self, registry: ConstraintRegistry, teaching: List[Slot]) -> Dict[str, int]:
        """Most weekly placements each subject can get: per day, its pool size
        or its allowed teaching slots, whichever is smaller."""
        out: Dict[str, int] = {}
        for name, count in zip(self.names, self.teachers):
            allowed: Counter = Counter(
                s.day for s in teaching if not registry.is_forbidden(name, s.day, s.period)
            )
            out[name] = sum(min(count, n) for n in allowed.values())
        return out

    def targets(
        self,
        weekly_slots: int,
        schedulable: Sequence[bool],
        capacities: Dict[str, int] | None = None,
    ) -> Dict[str, int]:
        # Even split over schedulable subjects, remainder round-robin in input
        # order; a subject's share above its capacity goes back to the others
        targets = {n: 0 for n in self.names}
        caps = capacities or {}
        open_ = [n for n, ok in zip(self.names, schedulable) if ok and caps.get(n, weekly_slots) > 0]
        remaining = weekly_slots
        while remaining > 0 and open_:
            base, remainder = divmod(remaining, len(open_))
            for i, name in enumerate(open_):
                share = base + (1 if i < remainder else 0)
                give = min(share, caps.get(name, weekly_slots) - targets[name])
                targets[name] += give
                remaining -= give
            open_ = [n for n in open_ if targets[n] < caps.get(n, weekly_slots)]
        return targets

    def build_subjects(
        self,
        weekly_slots: int,
        schedulable: Sequence[bool],
        capacities: Dict[str, int] | None = None,
    ) -> List[Subject]:
        targets = self.targets(weekly_slots, schedulable, capacities)
        return [Subject(n, t, targets[n]) for n, t in zip(self.names, self.teachers)]


class OccupancyLedger:
    def __init__(self):
        # Track (subject, teacher_index, day) and occupied slots
        self.teacher_busy: Set[Tuple[str, int, int]] = set()
        self.class_busy: Set[Slot] = set()
        self.subject_counts: Counter = Counter()
        self.day_counts: Counter = Counter()  # (subject, day)

    def can_place(self, subject: str | None, teacher_index: int | None, slot: Slot) -> bool:
        if slot in self.class_busy:
            return False
        if subject is None or teacher_index is None:
            return True
        return (subject, teacher_index, slot.day) not in self.teacher_busy

    def teacher_free(self, subject: str, teacher_index: int, day: int) -> bool:
        return (subject, teacher_index, day) not in self.teacher_busy

    def place(self, subject: str | None, teacher_index: int | None, slot: Slot) -> None:
        self.class_busy.add(slot)
        if subject is not None and teacher_index is not None:
            self.teacher_busy.add((subject, teacher_index, slot.day))
            self.subject_counts[subject] += 1
            self.day_counts[(subject, slot.day)] += 1

    def remove(self, subject: str | None, teacher_index: int | None, slot: Slot) -> None:
        self.class_busy.discard(slot)
        if subject is not None and teacher_index is not None:
            self.teacher_busy.discard((subject, teacher_index, slot.day))
            self.subject_counts[subject] -= 1
            self.day_counts[(subject, slot.day)] -= 1
