from __future__ import annotations

import math
from typing import List, Sequence

from ..errors import ConfigError
from ..models.constraint import FixedBreak
from ..models.period import BREAK, TEACHING, WEEKDAYS, Day, Period, Slot, is_teaching_label
from ..models.request import MAX_CLASSES_PER_DAY, MAX_WORKING_DAYS


def plan_days(working_days: int) -> List[Day]:
    if not 1 <= working_days <= MAX_WORKING_DAYS:
        raise ConfigError(f"expected 1..{MAX_WORKING_DAYS}, got {working_days}", "workingDays")
    return [Day(i, WEEKDAYS[i]) for i in range(working_days)]


def default_break_row(classes_per_day: int) -> int:
    # Directly after the period nearest the midpoint
    return math.ceil(classes_per_day / 2)


def plan_periods(
    classes_per_day: int,
    breaks: Sequence[FixedBreak] = (),
    *,
    default_break: bool = True,
    default_label: str = "Lunch",
) -> List[Period]:
    """Lay out the rows of one day: teaching periods with breaks inserted.

    Each break sits at its ``period_index`` in the final sequence and the
    teaching labels around it stay numbered ``Period 1..N``. Without any
    break and with ``default_break`` set, a single ``default_label`` row is
    added after period ``ceil(N / 2)``.
    """
    if not 1 <= classes_per_day <= MAX_CLASSES_PER_DAY:
        raise ConfigError(f"expected 1..{MAX_CLASSES_PER_DAY}, got {classes_per_day}", "classesPerDay")
    by_row = {b.period_index: b.label for b in breaks}
    if not by_row and default_break:
        by_row[default_break_row(classes_per_day)] = default_label
    total = classes_per_day + len(by_row)
    for row in sorted(by_row):
        if not 0 <= row < total:
            raise ConfigError(f"break row {row} outside 0..{total - 1}", "constraints")
        if is_teaching_label(by_row[row]):
            raise ConfigError(f"break label {by_row[row]!r} reads as a teaching period", "constraints")
    periods: List[Period] = []
    number = 0
    for row in range(total):
        if row in by_row:
            periods.append(Period(row, BREAK, by_row[row]))
        else:
            number += 1
            periods.append(Period(row, TEACHING, f"Period {number}"))
    return periods


def teaching_slots(periods: Sequence[Period], days: Sequence[Day]) -> List[Slot]:
    # Row-major: every day of a period before the next period
    return [Slot(p.index, d.index) for p in periods if not p.is_break for d in days]
