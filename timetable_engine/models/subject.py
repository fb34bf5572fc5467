from dataclasses import dataclass


@dataclass(frozen=True)
class Subject:
    name: str
    teachers: int
    target: int = 0

    @property
    def staffed(self) -> bool:
        return self.teachers > 0
