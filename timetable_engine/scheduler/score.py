from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..data.registry import ConstraintRegistry, OccupancyLedger
from ..models.period import Slot
from ..models.subject import Subject
from ..models.teacher import Teacher


@dataclass(frozen=True)
class Candidate:
    subject: str
    teacher_index: int
    rank: Tuple[int, int, int, int]


def pick_teacher(
    subject: Subject,
    slot: Slot,
    ledger: OccupancyLedger,
    registry: ConstraintRegistry,
) -> Tuple[int, bool] | None:
    """Return (teacher_index, preferred) for the best free teacher, if any."""
    free = [i for i in range(subject.teachers) if ledger.teacher_free(subject.name, i, slot.day)]
    if not free:
        return None
    for i in free:
        if registry.is_preferred(Teacher(subject.name, i), slot.day, slot.period):
            return i, True
    # Keep teachers with a preferred slot later today available for it
    for i in free:
        if not registry.has_pending_preference(Teacher(subject.name, i), slot.day, slot.period):
            return i, False
    return free[0], False


def rank_candidates(
    slot: Slot,
    subjects: Sequence[Subject],
    ledger: OccupancyLedger,
    registry: ConstraintRegistry,
) -> List[Candidate]:
    out: List[Candidate] = []
    for order, subj in enumerate(subjects):
        if not subj.staffed or registry.is_forbidden(subj.name, slot.day, slot.period):
            continue
        picked = pick_teacher(subj, slot, ledger, registry)
        if picked is None:
            continue
        teacher_index, preferred = picked
        deficit = subj.target - ledger.subject_counts[subj.name]
        rank = (
            -deficit,  # largest deficit first
            ledger.day_counts[(subj.name, slot.day)],  # spread across days
            0 if preferred else 1,
            order,  # stable input order
        )
        out.append(Candidate(subj.name, teacher_index, rank))
    out.sort(key=lambda c: c.rank)
    return out
