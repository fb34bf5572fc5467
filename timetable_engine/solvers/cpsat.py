from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ortools.sat.python import cp_model

from ..data.registry import ConstraintRegistry, OccupancyLedger
from ..errors import Cancelled, SolverError
from ..models.assignment import ClassAssignment
from ..models.period import Slot
from ..models.subject import Subject
from ..models.teacher import Teacher
from ..models.timetable import Timetable
from ..scheduler.cancel import CancelToken


class _CancelWatch(cp_model.CpSolverSolutionCallback):
    """Stops the search at the next solution once the caller cancels."""

    def __init__(self, cancel: CancelToken):
        cp_model.CpSolverSolutionCallback.__init__(self)
        self._cancel = cancel

    def on_solution_callback(self) -> None:
        if self._cancel.cancelled:
            self.StopSearch()


@dataclass
class SolverConfig:
    timeout_sec: float = 30.0
    workers: int = 1
    seed: int = 0
    weight_fill: int = 1_000
    weight_deviation: int = 10
    weight_preferred: int = 1


def solve_cpsat(
    tt: Timetable,
    ledger: OccupancyLedger,
    slots: Sequence[Slot],
    subjects: Sequence[Subject],
    registry: ConstraintRegistry,
    *,
    cfg: SolverConfig | None = None,
    cancel: CancelToken | None = None,
) -> Tuple[Timetable, List[str]]:
    """Exact alternative to the backtracking fill over the same teaching slots."""
    logger = logging.getLogger(__name__)
    cfg = cfg or SolverConfig()
    if cancel is not None:
        cancel.raise_if_cancelled()

    model = cp_model.CpModel()
    X: Dict[Tuple[Slot, str, int], cp_model.IntVar] = {}
    for slot in slots:
        cell_terms = []
        for subj in registry.allowed_subjects(subjects, slot.day, slot.period):
            for t in range(subj.teachers):
                var = model.NewBoolVar(f"x[{slot.period},{slot.day},{subj.name},{t}]")
                X[(slot, subj.name, t)] = var
                cell_terms.append(var)
        if cell_terms:
            model.Add(sum(cell_terms) <= 1)

    # Each teacher at most once per day
    by_teacher_day: Dict[Tuple[str, int, int], List[cp_model.IntVar]] = {}
    for (slot, name, t), var in X.items():
        by_teacher_day.setdefault((name, t, slot.day), []).append(var)
    for terms in by_teacher_day.values():
        if len(terms) > 1:
            model.Add(sum(terms) <= 1)

    # Objective: fill cells, stay close to targets, honour preferences
    objective = []
    for (slot, name, t), var in X.items():
        objective.append(cfg.weight_fill * var)
        if registry.is_preferred(Teacher(name, t), slot.day, slot.period):
            objective.append(cfg.weight_preferred * var)
    for subj in subjects:
        terms = [var for (_, name, _), var in X.items() if name == subj.name]
        if not terms:
            continue
        count = model.NewIntVar(0, len(slots), f"count[{subj.name}]")
        model.Add(count == sum(terms))
        dev = model.NewIntVar(0, len(slots), f"dev[{subj.name}]")
        model.AddAbsEquality(dev, count - subj.target)
        objective.append(-cfg.weight_deviation * dev)
    if objective:
        model.Maximize(sum(objective))

    timeout = cfg.timeout_sec
    if cancel is not None and cancel.remaining() is not None:
        timeout = min(timeout, cancel.remaining())
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = float(timeout)
    solver.parameters.num_workers = int(cfg.workers)
    solver.parameters.random_seed = int(cfg.seed)
    watch = _CancelWatch(cancel) if cancel is not None else None
    status = solver.Solve(model, watch) if watch is not None else solver.Solve(model)
    if cancel is not None and cancel.cancelled:
        raise Cancelled("cancelled by caller")
    audit: List[str] = [
        f"CP-SAT workers={cfg.workers} timeout={timeout}",
        f"status={solver.StatusName(status)} objective={solver.ObjectiveValue() if status in (cp_model.OPTIMAL, cp_model.FEASIBLE) else 'n/a'}",
    ]
    logger.info(audit[-1])

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        if cancel is not None and (cancel.cancelled or cancel.expired):
            raise Cancelled("timeout exceeded")
        raise SolverError(f"CP-SAT found no schedule (status {solver.StatusName(status)})")

    for (slot, name, t), var in sorted(X.items(), key=lambda kv: (kv[0][0].period, kv[0][0].day)):
        if solver.Value(var) == 1:
            tt.place(slot, ClassAssignment(name, t))
            ledger.place(name, t, slot)
            logger.debug(f"CP-SAT row {slot.period} day {slot.day} -> {name} #{t}")
    return tt, audit
