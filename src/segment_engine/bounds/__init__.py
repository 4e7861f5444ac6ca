"""Bounds limits and the calendar collaborator they lean on."""

from .calendar import CalendarField, CalendarService, GregorianCalendar, WallTime
from .limit import BoundsLimit, LimitSide

__all__ = [
    "BoundsLimit",
    "CalendarField",
    "CalendarService",
    "GregorianCalendar",
    "LimitSide",
    "WallTime",
]
