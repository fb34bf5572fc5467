"""Deterministic weekly class timetable generation."""

from .config import EngineConfig, load_config
from .errors import (
    Cancelled,
    ConfigError,
    ConstraintConflict,
    SolverError,
    TimetableError,
    ValidationError,
)
from .generate import generate, generate_timetable
from .models import Schedule, ScheduleWarning, TimetableRequest
from .scheduler import CancelToken

__all__ = [
    "CancelToken",
    "Cancelled",
    "ConfigError",
    "ConstraintConflict",
    "EngineConfig",
    "Schedule",
    "ScheduleWarning",
    "SolverError",
    "TimetableError",
    "TimetableRequest",
    "ValidationError",
    "generate",
    "generate_timetable",
    "load_config",
]
