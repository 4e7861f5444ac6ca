"""Time/date field model: epoch milliseconds edited as calendar fields."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from segment_engine.bounds.calendar import (
    MILLIS_PER_HOUR,
    MILLIS_PER_MINUTE,
    CalendarField,
    CalendarService,
    GregorianCalendar,
    WallTime,
)
from segment_engine.bounds.limit import BoundsLimit, LimitSide
from segment_engine.errors import OptionsError
from segment_engine.fields.models import Field, FieldKind, FieldStep, FieldValue
from segment_engine.fields.sequence import FieldSequence

from .base import EntryResult, RollKind, RollUnit
from .options import resolve_options

DEFAULT_MIN_YEAR = -9999
DEFAULT_MAX_YEAR = 9999

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ISO_TEXT = re.compile(
    r"^(?P<y>[+-]?\d{4,5})-(?P<m>\d{1,2})-(?P<d>\d{1,2})"
    r"(?:[T\s]+(?P<hrs>\d{1,2}):(?P<min>\d{2})"
    r"(?::(?P<sec>\d{2})(?:[.,](?P<frac>\d{1,3})\d*)?)?)?"
    r"\s*(?P<zone>Z|UTC|[+-]\d{2}(?::?\d{2})?)?$",
    re.IGNORECASE,
)
_TIME_TEXT = re.compile(
    r"^(?P<hrs>\d{1,2}):(?P<min>\d{2})(?::(?P<sec>\d{2})(?:[.,](?P<frac>\d{1,3})\d*)?)?$"
)

_ROLE_FIELDS = {
    "year": CalendarField.YEAR,
    "month": CalendarField.MONTH,
    "day": CalendarField.DAY,
    "hour": CalendarField.HOUR,
    "minute": CalendarField.MINUTE,
    "second": CalendarField.SECOND,
    "millis": CalendarField.MILLI,
}


class DateTimeStyle(enum.Enum):
    DATE_AND_TIME = "date_and_time"
    DATE_ONLY = "date_only"
    TIME_ONLY = "time_only"


class DateFieldOrder(enum.Enum):
    YMD = "ymd"
    DMY = "dmy"
    MDY = "mdy"


class HourStyle(enum.Enum):
    HOURS_24 = "hours_24"
    AM_PM = "am_pm"


class MeridiemStyle(enum.Enum):
    TRAILING = "trailing"
    LEADING = "leading"


class YearStyle(enum.Enum):
    POSITIVE_ONLY = "positive_only"
    AD_BC = "ad_bc"
    SIGNED = "signed"


@dataclass(frozen=True, slots=True)
class TimeEditorOptions:
    date_time_style: DateTimeStyle = DateTimeStyle.DATE_AND_TIME
    hour_style: HourStyle = HourStyle.HOURS_24
    meridiem_style: MeridiemStyle = MeridiemStyle.TRAILING
    year_style: YearStyle = YearStyle.POSITIVE_ONLY
    show_seconds: bool = False
    millis_digits: int = 0
    date_field_order: DateFieldOrder = DateFieldOrder.YMD
    date_separator: str = "-"
    time_separator: str = ":"
    date_time_separator: str = " "
    era_separator: str = " "
    decimal: str = "."
    time_first: bool = False
    two_digit_year: bool = False
    century_base: Optional[int] = None
    am_pm_strings: Tuple[str, str] = ("AM", "PM")
    era_strings: Tuple[str, str] = ("BC", "AD")
    utc_offset_minutes: int = 0
    show_utc_offset: bool = False
    rtl: bool = False
    locale: str = "en"
    numbering: str = "latn"

    def __post_init__(self) -> None:
        if not 0 <= self.millis_digits <= 3:
            raise OptionsError("millis_digits", self.millis_digits, "expected 0 to 3")
        for name in ("am_pm_strings", "era_strings"):
            pair = getattr(self, name)
            if len(pair) != 2 or not all(pair) or pair[0] == pair[1]:
                raise OptionsError(name, pair, "expected two distinct, non-empty strings")
        if not -1440 < self.utc_offset_minutes < 1440:
            raise OptionsError("utc_offset_minutes", self.utc_offset_minutes, "must be under a day")
        if self.numbering != "latn":
            raise OptionsError("numbering", self.numbering, "only 'latn' digits are supported")

    @classmethod
    def resolve(cls, options: Any = None) -> "TimeEditorOptions":
        """Build options from presets, mappings, instances or a list of them."""

        return resolve_options(cls, options, PRESETS)


PRESETS: Dict[str, Dict[str, Any]] = {
    "date_only": {"date_time_style": DateTimeStyle.DATE_ONLY},
    "iso": {
        "hour_style": HourStyle.HOURS_24,
        "date_field_order": DateFieldOrder.YMD,
        "date_separator": "-",
        "date_time_separator": "T",
        "date_time_style": DateTimeStyle.DATE_AND_TIME,
        "decimal": ".",
        "numbering": "latn",
        "show_seconds": True,
        "time_separator": ":",
        "two_digit_year": False,
    },
    "iso_date": {
        "date_field_order": DateFieldOrder.YMD,
        "date_separator": "-",
        "date_time_style": DateTimeStyle.DATE_ONLY,
        "numbering": "latn",
        "two_digit_year": False,
    },
}


def _distinguishing_keys(pair: Tuple[str, str], locale: str) -> Tuple[str, ...]:
    del locale
    first, second = pair
    for a, b in zip(first, second):
        if a != b:
            return (a.lower(), b.lower())
    return ()


def format_offset(minutes: int) -> str:
    sign = "-" if minutes < 0 else "+"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


class TimeFieldModel:
    """Field model for the time/date editor.

    Values are integer epoch milliseconds. Fields show wall time shifted by
    the fixed ``utc_offset_minutes``; calendar arithmetic is delegated to a
    ``CalendarService``.
    """

    kind = "time"
    preferred_roles = ("second", "minute", "day")

    def __init__(
        self,
        options: Optional[TimeEditorOptions] = None,
        *,
        calendar: Optional[CalendarService] = None,
    ) -> None:
        self.options = options or TimeEditorOptions()
        self.calendar: CalendarService = calendar or GregorianCalendar()
        opts = self.options
        self.rtl = opts.rtl
        self.has_date = opts.date_time_style is not DateTimeStyle.TIME_ONLY
        self.has_time = opts.date_time_style is not DateTimeStyle.DATE_ONLY
        self.two_digit_year = opts.two_digit_year and opts.year_style is YearStyle.POSITIVE_ONLY
        self.year_digits = 2 if self.two_digit_year else 4
        self.century_base = (
            opts.century_base if opts.century_base is not None else date.today().year - 80
        )
        self.am_pm_keys = _distinguishing_keys(opts.am_pm_strings, opts.locale)
        self.era_keys = _distinguishing_keys(opts.era_strings, opts.locale) or ("b", "a")
        self._offset_ms = opts.utc_offset_minutes * MILLIS_PER_MINUTE

        if self.has_date and self.has_time:
            self.invalid_text = "Invalid date/time"
        elif self.has_date:
            self.invalid_text = "Invalid date"
        else:
            self.invalid_text = "Invalid time"

    # Layout

    def build_steps(self) -> List[FieldStep]:
        opts = self.options
        date_steps: List[FieldStep] = []
        time_steps: List[FieldStep] = []

        if self.has_date:
            ds = FieldStep.separator(opts.date_separator, bidi=True)
            parts = {
                "year": FieldStep.digits("year", self.year_digits),
                "month": FieldStep.digits("month", 2),
                "day": FieldStep.digits("day", 2),
            }
            order = {
                DateFieldOrder.YMD: ("year", "month", "day"),
                DateFieldOrder.DMY: ("day", "month", "year"),
                DateFieldOrder.MDY: ("month", "day", "year"),
            }[opts.date_field_order]
            for position, role in enumerate(order):
                if position:
                    date_steps.append(ds)
                if role == "year" and opts.year_style is YearStyle.SIGNED:
                    date_steps.append(FieldStep(FieldKind.SIGN, "sign", tokens=("-", "+")))
                date_steps.append(parts[role])
            if opts.year_style is YearStyle.AD_BC:
                date_steps.append(FieldStep.separator(opts.era_separator))
                date_steps.append(FieldStep(FieldKind.TOKEN, "era", tokens=opts.era_strings))

        if self.has_time:
            ts = FieldStep.separator(opts.time_separator, bidi=True)
            time_steps += [FieldStep.digits("hour", 2), ts, FieldStep.digits("minute", 2)]
            if opts.show_seconds or opts.millis_digits > 0:
                time_steps += [ts, FieldStep.digits("second", 2)]
            if opts.millis_digits > 0:
                time_steps += [
                    FieldStep.separator(opts.decimal),
                    FieldStep.digits("millis", opts.millis_digits),
                ]
            if opts.hour_style is HourStyle.AM_PM:
                meridiem = FieldStep(FieldKind.TOKEN, "meridiem", tokens=opts.am_pm_strings)
                if opts.meridiem_style is MeridiemStyle.LEADING:
                    time_steps[:0] = [meridiem, FieldStep.separator(" ")]
                else:
                    time_steps += [FieldStep.separator(" "), meridiem]
            if opts.show_utc_offset:
                time_steps += [
                    FieldStep.separator(" "),
                    FieldStep(
                        FieldKind.INDICATOR,
                        "offset",
                        text=format_offset(opts.utc_offset_minutes),
                    ),
                ]

        dts = FieldStep.separator(opts.date_time_separator)
        if opts.time_first and date_steps and time_steps:
            return time_steps + [dts] + date_steps
        if date_steps and time_steps:
            return date_steps + [dts] + time_steps
        return date_steps or time_steps

    # Value conversion

    def wall_of(self, value: int) -> WallTime:
        return self.calendar.from_millis(int(value) + self._offset_ms)

    def millis_of(self, wall: WallTime) -> int:
        return self.calendar.to_millis(wall) - self._offset_ms

    def coerce(self, value: Any) -> int:
        if isinstance(value, bool):
            raise TypeError("booleans are not time values")
        if isinstance(value, datetime):
            moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
            delta = moment - _EPOCH
            return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            parsed = self.parse_text(value, 0)
            if parsed is None:
                raise ValueError(f"Unparsable time value {value!r}")
            return parsed
        raise TypeError(f"Unsupported time value type {type(value).__name__}")

    def export(self, value: int) -> int:
        return int(value)

    def decode(self, value: int, sequence: FieldSequence, into: Dict[int, FieldValue]) -> None:
        opts = self.options
        wall = self.wall_of(value)
        year = wall.y

        era = sequence.find("era")
        sign = sequence.find("sign")
        if era is not None:
            into[era.index] = opts.era_strings[0 if year < 1 else 1]
            shown = 1 - year if year < 1 else year
        elif sign is not None:
            into[sign.index] = "-" if year < 0 else "+"
            shown = abs(year)
        else:
            shown = 1 - year if year < 1 else year
        if self.two_digit_year:
            shown %= 100
        sequence.set_digits("year", shown, into=into)
        sequence.set_digits("month", wall.m, into=into)
        sequence.set_digits("day", wall.d, into=into)

        hours = wall.hrs
        meridiem = sequence.find("meridiem")
        if meridiem is not None:
            into[meridiem.index] = opts.am_pm_strings[0 if hours < 12 else 1]
            hours = 12 if hours == 0 else hours if hours <= 12 else hours - 12
        sequence.set_digits("hour", hours, into=into)
        sequence.set_digits("minute", wall.min, into=into)
        sequence.set_digits("second", wall.sec, into=into)
        if opts.millis_digits:
            sequence.set_digits(
                "millis", wall.millis // 10 ** (3 - opts.millis_digits), into=into
            )

        offset = sequence.find("offset")
        if offset is not None:
            into[offset.index] = format_offset(opts.utc_offset_minutes)

    def wall_from(
        self, sequence: FieldSequence, values: Dict[int, FieldValue], reference: int
    ) -> WallTime:
        """Broken-down time from field values; may be calendar-invalid."""

        opts = self.options
        ref = self.wall_of(reference)

        year = sequence.get_digits("year", ref.y, values)
        if self.two_digit_year and sequence.group("year") is not None:
            base = self.century_base
            year %= 100
            year = year - base % 100 + base + (100 if year < base % 100 else 0)

        era = sequence.find("era")
        sign = sequence.find("sign")
        if sequence.group("year") is not None:
            if era is not None and values.get(era.index) == opts.era_strings[0]:
                year = 1 - year
            elif sign is not None and values.get(sign.index) == "-":
                year = -year

        hours = sequence.get_digits("hour", ref.hrs, values)
        meridiem = sequence.find("meridiem")
        if meridiem is not None and sequence.group("hour") is not None:
            if values.get(meridiem.index) == opts.am_pm_strings[0]:
                hours = 0 if hours == 12 else min(hours, 12)
            elif hours != 12:
                hours = min(hours + 12, 23)

        millis = ref.millis
        if opts.millis_digits and sequence.group("millis") is not None:
            millis = sequence.get_digits("millis", 0, values) * 10 ** (3 - opts.millis_digits)

        return WallTime(
            year,
            sequence.get_digits("month", ref.m, values),
            sequence.get_digits("day", ref.d, values),
            hours,
            sequence.get_digits("minute", ref.min, values),
            sequence.get_digits("second", ref.sec, values),
            millis,
        )

    def encode(
        self, sequence: FieldSequence, values: Dict[int, FieldValue], reference: int = 0
    ) -> int:
        return self.millis_of(self.wall_from(sequence, values, reference))

    # Rolling

    def unit_for(self, sequence: FieldSequence, field: Field) -> Optional[RollUnit]:
        del sequence
        if field.role == "era":
            return RollUnit(RollKind.ERA)
        if field.role == "sign":
            return RollUnit(RollKind.NEGATE)
        if field.role == "meridiem":
            return RollUnit(RollKind.MERIDIEM)
        if field.kind is not FieldKind.DIGIT or field.role not in _ROLE_FIELDS:
            return None
        place = 10 ** (field.width - 1 - field.offset)
        if field.role == "millis":
            place *= 10 ** (3 - field.width)
        return RollUnit(RollKind.STEP, place, _ROLE_FIELDS[field.role])

    def _with_year(self, wall: WallTime, year: int) -> WallTime:
        day = min(wall.d, self.calendar.days_in_month(year, wall.m))
        return wall.with_(y=year, d=day)

    def shift(self, value: int, unit: RollUnit, direction: int) -> int:
        if unit.kind is RollKind.STEP:
            if unit.calendar_field is None:
                raise ValueError(f"Step unit {unit!r} has no calendar field")
            local = int(value) + self._offset_ms
            shifted = self.calendar.add(local, unit.calendar_field, unit.amount * direction)
            return shifted - self._offset_ms

        wall = self.wall_of(value)
        if unit.kind is RollKind.ERA:
            return self.millis_of(self._with_year(wall, 1 - wall.y))
        if unit.kind is RollKind.NEGATE:
            return self.millis_of(self._with_year(wall, -wall.y))
        return int(value) + (MILLIS_PER_HOUR * 12 if wall.hrs < 12 else -MILLIS_PER_HOUR * 12)

    def wrap(self, value: int) -> Optional[int]:
        del value
        return None

    # Bounds

    def parse_limit(self, spec: Any, side: LimitSide) -> Optional[BoundsLimit]:
        return BoundsLimit.parse(spec, side, calendar=self.calendar)

    def min_year(self, low: Optional[BoundsLimit]) -> int:
        floor = DEFAULT_MIN_YEAR
        if self.has_date and self.options.year_style is YearStyle.POSITIVE_ONLY:
            floor = 1
        if self.two_digit_year:
            floor = max(floor, self.century_base)
        if low is not None and low.year is not None:
            floor = max(floor, low.year)
        return floor

    def max_year(self, high: Optional[BoundsLimit]) -> int:
        ceiling = DEFAULT_MAX_YEAR
        if self.two_digit_year:
            ceiling = min(ceiling, self.century_base + 99)
        if high is not None and high.year is not None:
            ceiling = min(ceiling, high.year)
        return ceiling

    def range_check(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> int:
        wall = self.wall_of(value)
        if wall.y < self.min_year(low):
            return -1
        if wall.y > self.max_year(high):
            return 1
        if low is not None and low.violated_by(value, wall.components):
            return -1
        if high is not None and high.violated_by(value, wall.components):
            return 1
        return 0

    def clamp(self, value: int, limit: BoundsLimit) -> int:
        boundary = limit.boundary(self.calendar)
        wall = boundary if isinstance(boundary, WallTime) else self.wall_of(int(boundary))
        if limit.side is LimitSide.HIGH:
            digits = self.options.millis_digits
            if not self.options.show_seconds and not digits:
                wall = wall.with_(sec=0, millis=0)
            elif digits < 3:
                step = 10 ** (3 - digits)
                wall = wall.with_(millis=wall.millis // step * step)
        return self.millis_of(wall)

    def validation(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> Optional[Dict[str, Any]]:
        wall = self.wall_of(value)
        if wall.y < self.min_year(low):
            return {"min": {"message": f"Year must be at least {self.min_year(low)}"}}
        if wall.y > self.max_year(high):
            return {"max": {"message": f"Year must not be after {self.max_year(high)}"}}
        if low is not None and low.violated_by(value, wall.components):
            return {"min": {"message": f"Date/time must be on or after {low.text}"}}
        if high is not None and high.violated_by(value, wall.components):
            return {"max": {"message": f"Date/time must be on or before {high.text}"}}
        return None

    # Typed entry

    def accepts_token_key(self, field: Field, key: str) -> bool:
        lowered = key.lower()
        if field.role == "era":
            return lowered in ("1", "2") or lowered in self.era_keys
        if field.role == "sign":
            return key in (" ", "-", "+", "=")
        if field.role == "meridiem":
            return lowered in ("1", "2") or lowered in self.am_pm_keys
        return False

    def token_for_key(self, field: Field, current: FieldValue, key: str) -> Optional[str]:
        lowered = key.lower()
        if field.role == "era":
            bc, ad = self.options.era_strings
            if current == bc and lowered in (self.era_keys[1], "1"):
                return ad
            if current == ad and lowered in (self.era_keys[0], "2"):
                return bc
            return None
        if field.role == "sign":
            if current == "-" and key in (" ", "+", "="):
                return "+"
            if current != "-" and key == "-":
                return "-"
            return None
        if field.role == "meridiem":
            am, pm = self.options.am_pm_strings
            if lowered == "1" or (self.am_pm_keys and lowered == self.am_pm_keys[0]):
                return am
            if lowered == "2" or (self.am_pm_keys and lowered == self.am_pm_keys[1]):
                return pm
        return None

    def enter(
        self,
        sequence: FieldSequence,
        values: Dict[int, FieldValue],
        field: Field,
        reference: int,
        low: Optional[BoundsLimit],
        high: Optional[BoundsLimit],
    ) -> EntryResult:
        """Validate a tentative entry and derive the value it implies.

        Entries that cannot lead to a legal field value are rejected outright.
        Month, day and hour tens digits pin into their ranges, and a day past
        the end of the month is pulled back to the last day.
        """

        wall = self.wall_from(sequence, values, reference)
        if wall.y < self.min_year(low) or wall.y > self.max_year(high):
            return EntryResult.reject("year out of range")
        if (
            wall.m > 19
            or wall.d > 39
            or wall.hrs > 29
            or wall.min > 59
            or wall.sec > 59
            or wall.millis > 999
        ):
            return EntryResult.reject("field out of range")

        tens = field.kind is FieldKind.DIGIT and field.offset == 0
        if tens and field.role == "month":
            wall = wall.with_(m=min(max(wall.m, 1), 12))
        if tens and field.role == "day":
            wall = wall.with_(d=min(max(wall.d, 1), 31))
        if tens and field.role == "hour":
            wall = wall.with_(hrs=min(wall.hrs, 23))

        if wall.m == 0 or wall.m > 12 or wall.d == 0 or wall.hrs > 23:
            return EntryResult.reject("field out of range")

        normalized = False
        if not self.calendar.is_valid_date(wall):
            original_day = sequence.get_digits("day", 0)
            last = self.calendar.days_in_month(wall.y, wall.m)
            day = wall.d
            gap = self.calendar.missing_date_range(wall.y, wall.m)
            if gap is not None and gap[0] <= day <= gap[1]:
                day = gap[0] - 1 if original_day > day and gap[0] != 1 else min(gap[1] + 1, last)
                normalized = True
            if original_day > 0 and day > last:
                if field.role == "day" and (
                    (field.offset == 0 and last < 30 and day >= 30) or field.offset == 1
                ):
                    return EntryResult.reject("day past end of month")
                day = last
                normalized = True
            wall = wall.with_(d=day)

        return EntryResult(accepted=True, value=self.millis_of(wall), normalized=normalized)

    # Text

    def parse_text(self, text: str, reference: int) -> Optional[int]:
        """Parse ISO-8601 date/time text, or bare ``HH:MM[:SS[.fff]]``."""

        text = text.strip()
        match = _ISO_TEXT.match(text)
        if match is not None:
            parts = match.groupdict()
            wall = WallTime(
                int(parts["y"]),
                int(parts["m"]),
                int(parts["d"]),
                int(parts["hrs"] or 0),
                int(parts["min"] or 0),
                int(parts["sec"] or 0),
                int((parts["frac"] or "0").ljust(3, "0")),
            )
        else:
            match = _TIME_TEXT.match(text)
            if match is None:
                return None
            parts = match.groupdict()
            parts["zone"] = None
            wall = self.wall_of(reference).with_(
                hrs=int(parts["hrs"]),
                min=int(parts["min"]),
                sec=int(parts["sec"] or 0),
                millis=int((parts["frac"] or "0").ljust(3, "0")),
            )

        if not self.calendar.is_valid_date(wall):
            return None
        if wall.hrs > 23 or wall.min > 59 or wall.sec > 59:
            return None

        zone = (parts["zone"] or "").upper()
        if not zone:
            return self.millis_of(wall)
        if zone in ("Z", "UTC"):
            return self.calendar.to_millis(wall)
        digits = zone[1:].replace(":", "")
        minutes = int(digits[:2]) * 60 + int(digits[2:] or 0)
        if zone.startswith("-"):
            minutes = -minutes
        return self.calendar.to_millis(wall) - minutes * MILLIS_PER_MINUTE


__all__ = [
    "DEFAULT_MAX_YEAR",
    "DEFAULT_MIN_YEAR",
    "DateFieldOrder",
    "DateTimeStyle",
    "HourStyle",
    "MeridiemStyle",
    "PRESETS",
    "TimeEditorOptions",
    "TimeFieldModel",
    "YearStyle",
    "format_offset",
]
