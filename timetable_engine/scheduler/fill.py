from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from ..data.registry import ConstraintRegistry, OccupancyLedger
from ..models.assignment import ClassAssignment
from ..models.period import Slot
from ..models.subject import Subject
from ..models.timetable import Timetable
from .cancel import CancelToken
from .score import Candidate, rank_candidates


@dataclass
class _Episode:
    # Backtracking started from a dead end at `origin`
    origin: int
    picks: List[Optional[Candidate]]
    options: List[Optional[List[Candidate]]]
    cursor: List[int]
    remaining: int


def blocked_slots(
    slots: Sequence[Slot], subjects: Sequence[Subject], registry: ConstraintRegistry
) -> Set[Slot]:
    """Teaching slots that no staffed subject may ever occupy."""
    return {s for s in slots if not registry.allowed_subjects(subjects, s.day, s.period)}


def fill_schedule(
    tt: Timetable,
    ledger: OccupancyLedger,
    slots: Sequence[Slot],
    subjects: Sequence[Subject],
    registry: ConstraintRegistry,
    *,
    budget: int | None = None,
    cancel: CancelToken | None = None,
) -> Tuple[Timetable, List[str]]:
    """Fill teaching slots in order, backtracking from dead ends.

    Each dead end may spend up to ``budget`` backtrack steps. When they run
    out, or every alternative was tried, the grid goes back to its state at
    the dead end, that slot stays empty and the fill carries on.
    """
    logger = logging.getLogger(__name__)
    audit: List[str] = []

    n = len(slots)
    if budget is None:
        budget = n * len(subjects)
    blocked = blocked_slots(slots, subjects, registry)

    options: List[Optional[List[Candidate]]] = [None] * n
    cursor: List[int] = [0] * n
    picks: List[Optional[Candidate]] = [None] * n
    episode: _Episode | None = None
    total_backtracks = 0
    left_empty: List[Slot] = []

    def place(i: int, cand: Candidate) -> None:
        tt.place(slots[i], ClassAssignment(cand.subject, cand.teacher_index))
        ledger.place(cand.subject, cand.teacher_index, slots[i])
        picks[i] = cand

    def unplace(i: int) -> None:
        cand = picks[i]
        if cand is None:
            return
        tt.remove(slots[i])
        ledger.remove(cand.subject, cand.teacher_index, slots[i])
        picks[i] = None

    pos = 0
    while pos < n:
        if cancel is not None:
            cancel.raise_if_cancelled()
        if episode is not None and pos > episode.origin:
            logger.debug(f"Resolved dead end at {slots[episode.origin]}")
            episode = None
        slot = slots[pos]
        if options[pos] is None:
            options[pos] = rank_candidates(slot, subjects, ledger, registry)
            cursor[pos] = 0
        opts = options[pos]
        if cursor[pos] < len(opts):
            cand = opts[cursor[pos]]
            cursor[pos] += 1
            place(pos, cand)
            logger.debug(f"Fill row {slot.period} day {slot.day} -> {cand.subject} #{cand.teacher_index}")
            pos += 1
            continue
        if slot in blocked:
            pos += 1
            continue

        # Dead end: step back to the nearest slot with an untried candidate
        if episode is None:
            episode = _Episode(pos, picks[:pos], options[:pos], cursor[:pos], budget)
            logger.debug(f"Dead end at row {slot.period} day {slot.day}; backtracking")
        moved = False
        while episode.remaining > 0 and pos > 0:
            options[pos] = None
            pos -= 1
            episode.remaining -= 1
            total_backtracks += 1
            unplace(pos)
            if cursor[pos] < len(options[pos] or []):
                moved = True
                break
        if moved:
            continue

        # Out of budget or alternatives: restore and leave the origin empty
        origin = episode.origin
        for i in range(n):
            unplace(i)
        for i in range(origin):
            options[i] = episode.options[i]
            cursor[i] = episode.cursor[i]
            cand = episode.picks[i]
            if cand is not None:
                place(i, cand)
        for i in range(origin, n):
            options[i] = None
            cursor[i] = 0
        options[origin] = []
        left_empty.append(slots[origin])
        logger.info(f"Leaving row {slots[origin].period} day {slots[origin].day} empty")
        episode = None
        pos = origin + 1

    filled = sum(1 for p in picks if p is not None)
    logger.info(f"Fill placed {filled}/{n} teaching slots, {total_backtracks} backtrack steps")
    audit.append(f"Filled {filled} of {n} teaching slots with deficit-ranked placement.")
    if total_backtracks:
        audit.append(f"Backtracked {total_backtracks} steps (budget {budget} per dead end).")
    if left_empty:
        audit.append(f"Left {len(left_empty)} slots empty after exhausting alternatives.")
    if blocked:
        audit.append(f"Skipped {len(blocked)} slots where every subject is forbidden or unstaffed.")
    return tt, audit
