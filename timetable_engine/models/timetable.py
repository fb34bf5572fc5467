from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..errors import ConfigError
from .assignment import Assignment, BreakEvent, ClassAssignment
from .period import BREAK, TEACHING, Day, Period, Slot, is_teaching_label

UNSCHEDULABLE_SUBJECT = "unschedulable_subject"
PARTIAL_ASSIGNMENT = "partial_assignment"
LOAD_IMBALANCE = "load_imbalance"

_CLASS_CELL = re.compile(r"^(?P<subject>.+) - (?P=subject)-Teacher-(?P<number>\d+)$")


@dataclass(frozen=True)
class ScheduleWarning:
    kind: str  # unschedulable_subject, partial_assignment, load_imbalance
    message: str
    subject: str | None = None
    slots: Tuple[Slot, ...] = ()


@dataclass
class Timetable:
    """Mutable grid owned by a single solver run."""

    cells: Dict[Slot, Assignment] = field(default_factory=dict)

    def place(self, slot: Slot, a: Assignment) -> None:
        self.cells[slot] = a

    def get(self, period: int, day: int) -> Assignment | None:
        return self.cells.get(Slot(period, day))

    def occupied(self, slot: Slot) -> bool:
        return slot in self.cells

    def remove(self, slot: Slot) -> None:
        self.cells.pop(slot, None)

    def iter_day(self, day: int) -> Iterable[Tuple[Slot, Assignment]]:
        for slot, a in self.cells.items():
            if slot.day == day:
                yield slot, a

    def all(self) -> Iterable[Assignment]:
        return self.cells.values()

    def freeze(
        self,
        days: List[Day],
        periods: List[Period],
        warnings: Iterable[ScheduleWarning] = (),
    ) -> "Schedule":
        grid = tuple(
            tuple(self.cells.get(Slot(p.index, d.index)) for d in days) for p in periods
        )
        return Schedule(tuple(days), tuple(periods), grid, tuple(warnings))


@dataclass(frozen=True)
class Schedule:
    days: Tuple[Day, ...]
    periods: Tuple[Period, ...]
    grid: Tuple[Tuple[Optional[Assignment], ...], ...]
    warnings: Tuple[ScheduleWarning, ...] = ()

    def cell(self, period: int, day: int) -> Assignment | None:
        return self.grid[period][day]

    def class_assignments(self) -> Iterable[Tuple[Slot, ClassAssignment]]:
        for p, row in enumerate(self.grid):
            for d, a in enumerate(row):
                if isinstance(a, ClassAssignment):
                    yield Slot(p, d), a

    def subject_counts(self) -> Counter:
        return Counter(a.subject for _, a in self.class_assignments())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": [d.name for d in self.days],
            "periods": [p.label for p in self.periods],
            "schedule": [[None if a is None else a.render() for a in row] for row in self.grid],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        """Rebuild a schedule from the ``{days, periods, schedule}`` triple.

        Rows whose label is not ``Period N`` are read as break rows. Cells of
        the form ``"<Subject> - <Subject>-Teacher-<n>"`` become class
        assignments, any other string a break event. Anything that is not
        that shape raises ConfigError.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"expected a JSON object, got {type(data).__name__}", "schedule")
        for key in ("days", "periods", "schedule"):
            if not isinstance(data.get(key, []), list):
                raise ConfigError(f"{key!r} must be a list", "schedule")
        days = tuple(Day(i, str(name)) for i, name in enumerate(data.get("days", [])))
        periods = tuple(
            Period(i, TEACHING if is_teaching_label(str(label)) else BREAK, str(label))
            for i, label in enumerate(data.get("periods", []))
        )
        rows = []
        for p, row in enumerate(data.get("schedule", [])):
            if not isinstance(row, list):
                raise ConfigError(f"row {p} must be a list, got {row!r}", "schedule")
            cells: List[Optional[Assignment]] = []
            for value in row:
                if value is None:
                    cells.append(None)
                    continue
                if not isinstance(value, str):
                    raise ConfigError(f"row {p} holds {value!r}; cells are strings or null", "schedule")
                m = _CLASS_CELL.match(value)
                if m:
                    cells.append(ClassAssignment(m.group("subject"), int(m.group("number")) - 1))
                else:
                    cells.append(BreakEvent(value))
            rows.append(tuple(cells))
        return cls(days, periods, tuple(rows))
