from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .teacher import Teacher


@dataclass(frozen=True)
class FixedBreak:
    period_index: int
    label: str = "Lunch"


@dataclass(frozen=True)
class ForbiddenSlot:
    subject: str
    day: int | None = None  # None matches every day
    period: int | None = None  # None matches every row


@dataclass(frozen=True)
class PreferredSlot:
    teacher: Teacher
    day: int
    period: int


@dataclass(frozen=True)
class NoDoubleBooking:
    pass


Constraint = Union[FixedBreak, ForbiddenSlot, PreferredSlot, NoDoubleBooking]
