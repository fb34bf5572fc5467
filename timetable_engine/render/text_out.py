from __future__ import annotations

import json
from typing import Any, Dict, List

from ..models.timetable import Schedule

PERIOD_WIDTH = 15
DAY_WIDTH = 20


def text_table(schedule: Schedule) -> str:
    # Fixed-width layout of the product's text export; empty cells read "Free"
    lines: List[str] = ["Timetable", ""]
    lines.append("Period".ljust(PERIOD_WIDTH) + "".join(d.name.ljust(DAY_WIDTH) for d in schedule.days))
    lines.append("-" * PERIOD_WIDTH + "".join("-" * DAY_WIDTH for _ in schedule.days))
    for p, row in zip(schedule.periods, schedule.grid):
        cells = ("Free" if a is None else a.render() for a in row)
        lines.append(p.label.ljust(PERIOD_WIDTH) + "".join(c.ljust(DAY_WIDTH) for c in cells))
    return "\n".join(line.rstrip() for line in lines) + "\n"


def schedule_json(schedule: Schedule, *, with_warnings: bool = True) -> Dict[str, Any]:
    data = schedule.to_dict()
    if with_warnings:
        data["warnings"] = [
            {
                "kind": w.kind,
                "message": w.message,
                "subject": w.subject,
                "slots": [[s.period, s.day] for s in w.slots],
            }
            for w in schedule.warnings
        ]
    return data


def dumps(schedule: Schedule) -> str:
    return json.dumps(schedule_json(schedule), indent=2, ensure_ascii=False)
