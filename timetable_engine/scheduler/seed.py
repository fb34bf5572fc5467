from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from ..data.registry import OccupancyLedger
from ..models.assignment import BreakEvent
from ..models.period import Day, Period, Slot
from ..models.timetable import Timetable


def seed_breaks(
    tt: Timetable,
    ledger: OccupancyLedger,
    days: Sequence[Day],
    periods: Sequence[Period],
) -> Tuple[Timetable, List[str]]:
    logger = logging.getLogger(__name__)
    audit: List[str] = []

    # Breaks are immutable once seeded; the solver only visits teaching rows
    for p in periods:
        if not p.is_break:
            continue
        for d in days:
            slot = Slot(p.index, d.index)
            tt.place(slot, BreakEvent(p.label))
            ledger.place(None, None, slot)
        logger.info(f"Seed row {p.index} -> {p.label} on {len(days)} days")
        audit.append(f"Seeded {p.label} at row {p.index} across all days.")
    return tt, audit
