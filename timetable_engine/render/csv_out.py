from __future__ import annotations

import csv
import io
from pathlib import Path

from ..models.timetable import Schedule


def csv_grid(schedule: Schedule) -> str:
    # Header: Period,<day names>; one row per period, empty cells left blank
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(["Period"] + [d.name for d in schedule.days])
    for p, row in zip(schedule.periods, schedule.grid):
        w.writerow([p.label] + ["" if a is None else a.render() for a in row])
    return buf.getvalue()


def write_csv_grid(text: str, outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "timetable.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)
    return path
