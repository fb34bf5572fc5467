from dataclasses import dataclass


def teacher_label(subject: str, index: int) -> str:
    return f"{subject}-Teacher-{index + 1}"


@dataclass(frozen=True)
class Teacher:
    subject: str
    index: int

    @property
    def label(self) -> str:
        return teacher_label(self.subject, self.index)
