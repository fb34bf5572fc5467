from __future__ import annotations

from pathlib import Path


EXCLUDE = {"__init__.py"}


def count_loc(path: Path) -> int:
    return len(path.read_text(encoding="utf-8").splitlines())


def test_line_budget_per_file() -> None:
    root = Path(__file__).resolve().parents[1]
    budget = 500
    offenders: list[tuple[str, int]] = []
    for folder in ("timetable_engine", "tests", "scripts"):
        for p in (root / folder).rglob("*.py"):
            if p.name in EXCLUDE:
                continue
            loc = count_loc(p)
            if loc > budget:
                offenders.append((str(p), loc))
    assert not offenders, f"Files exceeding {budget} LOC: {offenders}"
