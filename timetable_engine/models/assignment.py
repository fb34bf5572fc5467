from dataclasses import dataclass
from typing import Union

from .teacher import teacher_label


@dataclass(frozen=True)
class BreakEvent:
    label: str

    def render(self) -> str:
        return self.label


@dataclass(frozen=True)
class ClassAssignment:
    subject: str
    teacher_index: int

    @property
    def teacher(self) -> str:
        return teacher_label(self.subject, self.teacher_index)

    def render(self) -> str:
        return f"{self.subject} - {self.teacher}"


# An empty cell is None
Assignment = Union[BreakEvent, ClassAssignment]
