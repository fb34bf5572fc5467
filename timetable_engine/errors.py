"""Exceptions raised by the timetable engine."""

from __future__ import annotations


class TimetableError(Exception):
    """Base exception for engine errors."""

    pass


class ConfigError(TimetableError):
    """Request or configuration values are out of range or malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        prefix = f"Invalid {field}: " if field else "Invalid configuration: "
        super().__init__(prefix + message)


class ConstraintConflict(TimetableError):
    """Two structured constraints contradict each other."""

    def __init__(self, first: object, second: object, reason: str):
        self.first = first
        self.second = second
        self.reason = reason
        super().__init__(f"Conflicting constraints {first!r} and {second!r}: {reason}")


class SolverError(TimetableError):
    """No subject can be scheduled at all."""

    pass


class Cancelled(TimetableError):
    """Generation was aborted by the caller or by its timeout."""

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"Timetable generation aborted: {reason}")


class ValidationError(TimetableError):
    """A produced schedule breaks one of the grid invariants."""

    def __init__(self, rule: str, message: str):
        self.rule = rule
        super().__init__(f"[{rule}] {message}")
