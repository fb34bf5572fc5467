from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List

from .config import EngineConfig
from .data.registry import ConstraintRegistry, OccupancyLedger, SubjectQuotas
from .errors import SolverError, ValidationError
from .models.assignment import ClassAssignment
from .models.period import Day, Period, Slot
from .models.request import TimetableRequest
from .models.subject import Subject
from .models.timetable import (
    LOAD_IMBALANCE,
    PARTIAL_ASSIGNMENT,
    UNSCHEDULABLE_SUBJECT,
    Schedule,
    ScheduleWarning,
    Timetable,
)
from .scheduler import CancelToken, blocked_slots, fill_schedule, seed_breaks
from .scheduler.planner import plan_days, plan_periods, teaching_slots
from .validate.checks import validate_schedule


@dataclass
class Plan:
    """Everything derived from a request before any slot is filled."""

    request: TimetableRequest
    days: List[Day]
    periods: List[Period]
    registry: ConstraintRegistry
    subjects: List[Subject]
    slots: List[Slot]
    schedulable: List[bool]


@dataclass
class Generation:
    schedule: Schedule
    plan: Plan
    audit: List[str] = field(default_factory=list)


def prepare(request: TimetableRequest, config: EngineConfig | None = None) -> Plan:
    config = config or EngineConfig()
    request.validate()
    days = plan_days(request.working_days)
    registry = ConstraintRegistry(request.constraints, request.subjects)
    periods = plan_periods(
        request.classes_per_day,
        registry.fixed_breaks(),
        default_break=config.default_break,
        default_label=config.default_break_label,
    )
    registry.bind(days, periods, request.teachers_per_subject)
    slots = teaching_slots(periods, days)
    quotas = SubjectQuotas(request.subjects, request.teachers_per_subject)
    schedulable = quotas.schedulable(registry, slots)
    capacities = quotas.capacities(registry, slots)
    subjects = quotas.build_subjects(len(slots), schedulable, capacities)
    return Plan(request, days, periods, registry, subjects, slots, schedulable)


def _subject_warnings(plan: Plan) -> List[ScheduleWarning]:
    out: List[ScheduleWarning] = []
    for subj, ok in zip(plan.subjects, plan.schedulable):
        if ok:
            continue
        if not subj.staffed:
            message = f"{subj.name} has no teachers and was not scheduled"
        else:
            message = f"{subj.name} is forbidden from every teaching slot and was not scheduled"
        out.append(ScheduleWarning(UNSCHEDULABLE_SUBJECT, message, subject=subj.name))
    return out


def _load_warnings(plan: Plan, tt: Timetable) -> List[ScheduleWarning]:
    counts = Counter(a.subject for a in tt.all() if isinstance(a, ClassAssignment))
    out: List[ScheduleWarning] = []
    for subj in plan.subjects:
        assigned = counts[subj.name]
        if abs(assigned - subj.target) > 1:
            out.append(
                ScheduleWarning(
                    LOAD_IMBALANCE,
                    f"{subj.name} got {assigned} classes against a target of {subj.target}",
                    subject=subj.name,
                )
            )
    return out


def generate(
    request: TimetableRequest,
    *,
    config: EngineConfig | None = None,
    cancel: CancelToken | None = None,
    solver: str | None = None,
) -> Generation:
    logger = logging.getLogger(__name__)
    config = config or EngineConfig()
    if cancel is None and config.timeout_sec is not None:
        cancel = CancelToken(config.timeout_sec)
    solver = solver or config.solver

    plan = prepare(request, config)
    logger.info(
        f"Planning {len(plan.days)} days x {len(plan.periods)} rows, "
        f"{len(plan.slots)} teaching slots, {len(plan.subjects)} subjects"
    )
    if any(s.staffed for s in plan.subjects) and not any(plan.schedulable):
        raise SolverError("no staffed subject can be placed in any teaching slot")
    warnings = _subject_warnings(plan)
    for w in warnings:
        logger.warning(w.message)

    tt = Timetable()
    ledger = OccupancyLedger()
    tt, audit = seed_breaks(tt, ledger, plan.days, plan.periods)
    if solver == "cpsat":
        from .solvers.cpsat import SolverConfig, solve_cpsat

        cfg = SolverConfig(workers=config.cpsat_workers, seed=config.cpsat_seed)
        if config.timeout_sec is not None:
            cfg.timeout_sec = config.timeout_sec
        tt, fill_audit = solve_cpsat(tt, ledger, plan.slots, plan.subjects, plan.registry, cfg=cfg, cancel=cancel)
    else:
        tt, fill_audit = fill_schedule(
            tt,
            ledger,
            plan.slots,
            plan.subjects,
            plan.registry,
            budget=config.backtrack_budget,
            cancel=cancel,
        )
    audit.extend(fill_audit)

    blocked = blocked_slots(plan.slots, plan.subjects, plan.registry)
    unfilled = tuple(s for s in plan.slots if not tt.occupied(s) and s not in blocked)
    if unfilled:
        w = ScheduleWarning(
            PARTIAL_ASSIGNMENT,
            f"{len(unfilled)} teaching slots could not be filled within teacher capacity",
            slots=unfilled,
        )
        logger.warning(w.message)
        warnings.append(w)
    for w in _load_warnings(plan, tt):
        logger.warning(w.message)
        warnings.append(w)

    schedule = tt.freeze(plan.days, plan.periods, warnings)
    try:
        validate_schedule(schedule, plan.registry, plan.subjects)
    except ValidationError as e:
        logger.error(f"Generated schedule failed validation: {e}")
        raise
    return Generation(schedule, plan, audit)


def generate_timetable(
    request: TimetableRequest,
    *,
    config: EngineConfig | None = None,
    cancel: CancelToken | None = None,
    solver: str | None = None,
) -> Schedule:
    """Build a validated weekly schedule for ``request``.

    Raises ConfigError, ConstraintConflict, SolverError or Cancelled; non
    fatal problems are attached to the returned schedule as warnings.
    """
    return generate(request, config=config, cancel=cancel, solver=solver).schedule
