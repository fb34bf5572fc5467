import re
from dataclasses import dataclass

TEACHING = "teaching"
BREAK = "break"

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_TEACHING_LABEL = re.compile(r"^Period \d+$")


def is_teaching_label(label: str) -> bool:
    return _TEACHING_LABEL.match(label) is not None


@dataclass(frozen=True)
class Day:
    index: int
    name: str


@dataclass(frozen=True)
class Period:
    index: int
    kind: str  # teaching, break
    label: str

    @property
    def is_break(self) -> bool:
        return self.kind == BREAK


@dataclass(frozen=True)
class Slot:
    period: int
    day: int
