from __future__ import annotations

from collections import Counter, defaultdict
from typing import Dict, Iterator, List, Sequence, Tuple

from ..data.registry import ConstraintRegistry
from ..errors import ValidationError
from ..models.assignment import BreakEvent, ClassAssignment
from ..models.subject import Subject
from ..models.timetable import Schedule

Violation = Tuple[str, str]  # (rule, message)


def iter_violations(
    schedule: Schedule, registry: ConstraintRegistry, subjects: Sequence[Subject]
) -> Iterator[Violation]:
    """Yield grid invariant violations in a fixed order, shape checks first."""
    if len(schedule.grid) != len(schedule.periods):
        yield "grid_shape", f"{len(schedule.grid)} rows for {len(schedule.periods)} periods"
        return
    for p, row in enumerate(schedule.grid):
        if len(row) != len(schedule.days):
            yield "grid_shape", f"row {p} has {len(row)} cells for {len(schedule.days)} days"
            return

    for row in registry.break_rows():
        if row >= len(schedule.periods):
            yield "break_row", f"break {registry.break_label(row)!r} at row {row} is missing"

    pools = {s.name: s.teachers for s in subjects}
    seen: Dict[Tuple[int, str, int], int] = {}
    for p, period in enumerate(schedule.periods):
        expected = registry.break_label(p)
        if expected is not None and (not period.is_break or period.label != expected):
            yield "break_row", f"row {p} should be break {expected!r}, found {period.label!r}"
        for d, a in enumerate(schedule.grid[p]):
            where = f"row {p} ({period.label}) on {schedule.days[d].name}"
            if period.is_break:
                if a != BreakEvent(period.label):
                    yield "break_row", f"{where} holds {a!r} instead of {period.label!r}"
                continue
            if a is None:
                continue
            if isinstance(a, BreakEvent):
                yield "break_in_teaching_row", f"{where} holds break {a.label!r}"
                continue
            if not isinstance(a, ClassAssignment) or a.subject not in pools:
                yield "unknown_subject", f"{where} holds {a!r}"
                continue
            if not 0 <= a.teacher_index < pools[a.subject]:
                yield "teacher_capacity", f"{where}: {a.teacher} outside a pool of {pools[a.subject]}"
                continue
            if registry.is_forbidden(a.subject, d, p):
                yield "forbidden_slot", f"{where}: {a.subject} is forbidden here"
            key = (d, a.subject, a.teacher_index)
            if key in seen:
                yield "double_booking", f"{where}: {a.teacher} already teaches row {seen[key]} that day"
            else:
                seen[key] = p


def validate_schedule(
    schedule: Schedule, registry: ConstraintRegistry, subjects: Sequence[Subject]
) -> Schedule:
    for rule, message in iter_violations(schedule, registry, subjects):
        raise ValidationError(rule, message)
    return schedule


def validate_all(
    schedule: Schedule, registry: ConstraintRegistry, subjects: Sequence[Subject]
) -> Dict[str, object]:
    report: Dict[str, object] = {}
    violations_by_rule: Dict[str, List[str]] = defaultdict(list)
    for rule, message in iter_violations(schedule, registry, subjects):
        violations_by_rule[rule].append(message)
    report["violation_count"] = sum(len(v) for v in violations_by_rule.values())
    report["violations_by_rule"] = dict(violations_by_rule)

    # Weekly load against target per subject
    counts: Counter = schedule.subject_counts() if "grid_shape" not in violations_by_rule else Counter()
    report["subject_load"] = {
        s.name: {"assigned": counts.get(s.name, 0), "target": s.target} for s in subjects
    }
    report["load_outside_tolerance"] = sorted(
        s.name for s in subjects if abs(counts.get(s.name, 0) - s.target) > 1
    )
    empty = 0
    if "grid_shape" not in violations_by_rule:
        empty = sum(
            1
            for p in schedule.periods
            if not p.is_break
            for a in schedule.grid[p.index]
            if a is None
        )
    report["empty_teaching_slots"] = empty
    report["warnings"] = [w.message for w in schedule.warnings]
    return report
