# Re-export common types
from .assignment import Assignment, BreakEvent, ClassAssignment
from .constraint import Constraint, FixedBreak, ForbiddenSlot, NoDoubleBooking, PreferredSlot
from .period import Day, Period, Slot
from .request import TimetableRequest
from .subject import Subject
from .teacher import Teacher
from .timetable import Schedule, ScheduleWarning, Timetable

__all__ = [
    "Assignment",
    "BreakEvent",
    "ClassAssignment",
    "Constraint",
    "Day",
    "FixedBreak",
    "ForbiddenSlot",
    "NoDoubleBooking",
    "Period",
    "PreferredSlot",
    "Schedule",
    "ScheduleWarning",
    "Slot",
    "Subject",
    "Teacher",
    "Timetable",
    "TimetableRequest",
]
