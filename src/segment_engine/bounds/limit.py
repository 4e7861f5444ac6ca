"""Minimum/maximum limits, possibly specified only to partial granularity."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence, Tuple, Union

from segment_engine.errors import BoundsSpecError

from .calendar import CalendarService, GregorianCalendar, WallTime

Partial = Tuple[Optional[int], ...]

COMPONENT_NAMES = ("year", "month", "day", "hour", "minute", "second", "millis")

_PARTIAL_TEXT = re.compile(
    r"^(?P<y>[+-]?\d{1,5})"
    r"(?:-(?P<m>\d{1,2})"
    r"(?:-(?P<d>\d{1,2})"
    r"(?:[T\s](?P<hrs>\d{1,2})"
    r"(?::(?P<min>\d{1,2})"
    r"(?::(?P<sec>\d{1,2})"
    r"(?:\.(?P<frac>\d{1,3}))?)?)?)?)?)?"
    r"(?P<zone>Z)?$",
    re.IGNORECASE,
)
_RAW_INSTANT = re.compile(r"^[+-]?\d{5,}$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


class LimitSide(enum.Enum):
    LOW = "low"
    HIGH = "high"


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True, slots=True)
class BoundsLimit:
    """A low or high limit.

    Exactly one of ``resolved`` (a number in the value's own units) and
    ``partial`` (year..millis, trailing entries ``None``) is set.
    ``compare`` follows ``sign(value - limit)``: a value is below a low limit
    when it returns -1 and above a high limit when it returns +1.
    """

    side: LimitSide
    text: str
    resolved: Optional[float] = None
    partial: Optional[Partial] = None
    year: Optional[int] = None

    @property
    def is_partial(self) -> bool:
        return self.partial is not None

    def compare(self, value: float, components: Optional[Sequence[int]] = None) -> int:
        if self.partial is None:
            return _sign(value - (self.resolved or 0))
        if components is None:
            raise ValueError("A partial limit compares against broken-down components")

        for limit_part, part in zip(self.partial, components):
            if limit_part is None:
                return 0
            if part != limit_part:
                return _sign(part - limit_part)
        return 0

    def violated_by(self, value: float, components: Optional[Sequence[int]] = None) -> bool:
        result = self.compare(value, components)
        return result < 0 if self.side is LimitSide.LOW else result > 0

    def boundary(self, calendar: Optional[CalendarService] = None) -> Union[float, WallTime]:
        """The extreme legal value on this limit's side.

        Unspecified components take their minimum for a low limit and their
        maximum (end of unit) for a high one.
        """

        if self.partial is None:
            return self.resolved or 0
        cal = calendar or GregorianCalendar()
        y, m, d, hrs, minute, sec, millis = self.partial
        if y is None:
            raise ValueError(f"Partial limit '{self.text}' has no year")
        low = self.side is LimitSide.LOW
        month = m if m is not None else (1 if low else 12)
        day = d if d is not None else (1 if low else cal.days_in_month(y, month))
        wall = WallTime(
            y,
            month,
            day,
            hrs if hrs is not None else (0 if low else 23),
            minute if minute is not None else (0 if low else 59),
            0,
            0,
        )
        if sec is not None:
            wall = wall.with_(sec=sec)
        elif not low:
            wall = wall.with_(sec=cal.last_second(wall))
        if millis is not None:
            wall = wall.with_(millis=millis)
        elif not low:
            wall = wall.with_(millis=999)
        return wall

    def clamp_to(
        self,
        value: float,
        components: Optional[Sequence[int]] = None,
        calendar: Optional[CalendarService] = None,
    ) -> Union[float, WallTime]:
        if self.violated_by(value, components):
            return self.boundary(calendar)
        return value

    @classmethod
    def numeric(cls, value: Any, side: LimitSide) -> Optional["BoundsLimit"]:
        """A fully-resolved limit for plain numeric domains (angles)."""

        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, bool):
            raise BoundsSpecError(value, "booleans are not limits")
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise BoundsSpecError(value, "not a number") from exc
        if number != number:
            raise BoundsSpecError(value, "NaN")
        return cls(side=side, text=str(value).strip(), resolved=number)

    @classmethod
    def parse(
        cls,
        spec: Any,
        side: LimitSide,
        *,
        calendar: Optional[CalendarService] = None,
    ) -> Optional["BoundsLimit"]:
        """Parse a time limit; ``None`` or blank text means unbounded."""

        cal = calendar or GregorianCalendar()

        if spec is None or (isinstance(spec, str) and not spec.strip()):
            return None
        if isinstance(spec, bool):
            raise BoundsSpecError(spec, "booleans are not limits")
        if isinstance(spec, datetime):
            moment = spec if spec.tzinfo else spec.replace(tzinfo=timezone.utc)
            millis = (moment - _EPOCH) // _MILLISECOND
            return cls._resolved(millis, side, cal, moment.isoformat())
        if isinstance(spec, (int, float)):
            if abs(spec) < 10000:
                spec = str(int(spec))
            else:
                return cls._resolved(int(spec), side, cal, str(int(spec)))
        if not isinstance(spec, str):
            raise BoundsSpecError(spec, f"unsupported type {type(spec).__name__}")

        text = spec.strip()
        if _RAW_INSTANT.match(text):
            return cls._resolved(int(text), side, cal, text)

        text = re.sub(r"[-:]$", "", text)
        match = _PARTIAL_TEXT.match(text)
        if match is None:
            raise BoundsSpecError(spec)

        groups = match.groupdict()
        frac = groups.pop("frac")
        zone = groups.pop("zone")
        parts: list[Optional[int]] = [
            int(groups[name]) if groups[name] is not None else None
            for name in ("y", "m", "d", "hrs", "min", "sec")
        ]
        parts.append(int(frac.ljust(3, "0")) if frac is not None else None)
        _check_components(spec, parts, cal)

        if zone:
            filled = [p if p is not None else default for p, default in zip(parts, (0, 1, 1, 0, 0, 0, 0))]
            millis = cal.to_millis(WallTime(*filled))
            return cls._resolved(millis, side, cal, text)

        return cls(side=side, text=text, partial=tuple(parts), year=parts[0])

    @classmethod
    def _resolved(
        cls, millis: int, side: LimitSide, cal: CalendarService, text: str
    ) -> "BoundsLimit":
        return cls(
            side=side,
            text=text,
            resolved=millis,
            year=cal.from_millis(millis).y,
        )


def _check_components(spec: Any, parts: Sequence[Optional[int]], cal: CalendarService) -> None:
    y, m, d, hrs, minute, sec, _millis = parts
    if y is None:
        raise BoundsSpecError(spec, "year is required")
    if m is not None and not 1 <= m <= 12:
        raise BoundsSpecError(spec, "month out of range")
    if d is not None and m is not None and not 1 <= d <= cal.days_in_month(y, m):
        raise BoundsSpecError(spec, "day out of range")
    if hrs is not None and not 0 <= hrs <= 23:
        raise BoundsSpecError(spec, "hour out of range")
    if minute is not None and not 0 <= minute <= 59:
        raise BoundsSpecError(spec, "minute out of range")
    if sec is not None and not 0 <= sec <= 59:
        raise BoundsSpecError(spec, "second out of range")


__all__ = ["BoundsLimit", "LimitSide", "COMPONENT_NAMES"]
