"""Calendar collaborator: wall-time arithmetic and validity lookups.

Years use astronomical numbering (year 0 is 1 BC, year -1 is 2 BC). The
bundled ``GregorianCalendar`` is proleptic and zoneless: no leap seconds, no
Julian-to-Gregorian gap. Hosts needing either inject their own service.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Tuple

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY = 24 * MILLIS_PER_HOUR

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


class CalendarField(enum.Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MILLI = "milli"


_FIXED_UNITS = {
    CalendarField.DAY: MILLIS_PER_DAY,
    CalendarField.HOUR: MILLIS_PER_HOUR,
    CalendarField.MINUTE: MILLIS_PER_MINUTE,
    CalendarField.SECOND: MILLIS_PER_SECOND,
    CalendarField.MILLI: 1,
}


@dataclass(frozen=True, slots=True)
class WallTime:
    """Broken-down civil time."""

    y: int
    m: int = 1
    d: int = 1
    hrs: int = 0
    min: int = 0
    sec: int = 0
    millis: int = 0

    @property
    def components(self) -> Tuple[int, int, int, int, int, int, int]:
        return (self.y, self.m, self.d, self.hrs, self.min, self.sec, self.millis)

    def with_(self, **changes: int) -> "WallTime":
        return replace(self, **changes)


class CalendarService(Protocol):
    def is_leap_year(self, year: int) -> bool: ...

    def days_in_month(self, year: int, month: int) -> int: ...

    def is_valid_date(self, wall: WallTime) -> bool: ...

    def last_second(self, wall: WallTime) -> int: ...

    def missing_date_range(self, year: int, month: int) -> Optional[Tuple[int, int]]: ...

    def to_millis(self, wall: WallTime) -> int: ...

    def from_millis(self, millis: int) -> WallTime: ...

    def add(self, millis: int, field: CalendarField, amount: int) -> int: ...


def days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 for a proleptic Gregorian date."""

    y = year - (1 if month <= 2 else 0)
    era = y // 400
    yoe = y - era * 400
    doy = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def civil_from_days(days: int) -> Tuple[int, int, int]:
    z = days + 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    return yoe + era * 400 + (1 if month <= 2 else 0), month, day


class GregorianCalendar:
    """Proleptic Gregorian calendar over integer epoch milliseconds."""

    def is_leap_year(self, year: int) -> bool:
        return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)

    def days_in_month(self, year: int, month: int) -> int:
        if month == 2 and self.is_leap_year(year):
            return 29
        return _MONTH_LENGTHS[month - 1]

    def is_valid_date(self, wall: WallTime) -> bool:
        if not 1 <= wall.m <= 12:
            return False
        return 1 <= wall.d <= self.days_in_month(wall.y, wall.m)

    def last_second(self, wall: WallTime) -> int:
        del wall
        return 59

    def missing_date_range(self, year: int, month: int) -> Optional[Tuple[int, int]]:
        del year, month
        return None

    def to_millis(self, wall: WallTime) -> int:
        days = days_from_civil(wall.y, wall.m, wall.d)
        return (
            days * MILLIS_PER_DAY
            + wall.hrs * MILLIS_PER_HOUR
            + wall.min * MILLIS_PER_MINUTE
            + wall.sec * MILLIS_PER_SECOND
            + wall.millis
        )

    def from_millis(self, millis: int) -> WallTime:
        days, rem = divmod(int(millis), MILLIS_PER_DAY)
        y, m, d = civil_from_days(days)
        hrs, rem = divmod(rem, MILLIS_PER_HOUR)
        minute, rem = divmod(rem, MILLIS_PER_MINUTE)
        sec, ms = divmod(rem, MILLIS_PER_SECOND)
        return WallTime(y, m, d, hrs, minute, sec, ms)

    def add(self, millis: int, field: CalendarField, amount: int) -> int:
        if field in _FIXED_UNITS:
            return int(millis) + amount * _FIXED_UNITS[field]

        wall = self.from_millis(millis)
        months = amount * (12 if field is CalendarField.YEAR else 1)
        total = wall.y * 12 + (wall.m - 1) + months
        year, month0 = divmod(total, 12)
        day = min(wall.d, self.days_in_month(year, month0 + 1))
        return self.to_millis(wall.with_(y=year, m=month0 + 1, d=day))


__all__ = [
    "CalendarField",
    "CalendarService",
    "GregorianCalendar",
    "WallTime",
    "civil_from_days",
    "days_from_civil",
    "MILLIS_PER_DAY",
    "MILLIS_PER_HOUR",
    "MILLIS_PER_MINUTE",
    "MILLIS_PER_SECOND",
]
