from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import ConfigError
from .constraint import Constraint

MAX_WORKING_DAYS = 7
MAX_CLASSES_PER_DAY = 12


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class TimetableRequest:
    working_days: int
    classes_per_day: int
    subjects: Tuple[str, ...]
    teachers_per_subject: Tuple[int, ...]
    constraints: Tuple[Constraint, ...] = ()

    def validate(self) -> "TimetableRequest":
        if not _is_int(self.working_days) or not 1 <= self.working_days <= MAX_WORKING_DAYS:
            raise ConfigError(
                f"expected 1..{MAX_WORKING_DAYS}, got {self.working_days!r}", "workingDays"
            )
        if not _is_int(self.classes_per_day) or not 1 <= self.classes_per_day <= MAX_CLASSES_PER_DAY:
            raise ConfigError(
                f"expected 1..{MAX_CLASSES_PER_DAY}, got {self.classes_per_day!r}", "classesPerDay"
            )
        if not self.subjects:
            raise ConfigError("at least one subject is required", "subjects")
        for name in self.subjects:
            if not isinstance(name, str) or not name.strip():
                raise ConfigError(f"subject names must be non-empty, got {name!r}", "subjects")
        if len(set(self.subjects)) != len(self.subjects):
            raise ConfigError("subject names must be distinct", "subjects")
        if len(self.subjects) != len(self.teachers_per_subject):
            raise ConfigError(
                f"{len(self.teachers_per_subject)} counts for {len(self.subjects)} subjects",
                "teachersPerSubject",
            )
        for count in self.teachers_per_subject:
            if not _is_int(count) or count < 0:
                raise ConfigError(f"counts must be non-negative integers, got {count!r}", "teachersPerSubject")
        return self
