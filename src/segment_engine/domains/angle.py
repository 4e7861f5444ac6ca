"""Angle field model: degrees with optional minutes, seconds and decimals."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from segment_engine.bounds.limit import BoundsLimit, LimitSide
from segment_engine.errors import OptionsError
from segment_engine.fields.models import Field, FieldKind, FieldStep, FieldValue
from segment_engine.fields.sequence import FieldSequence

from .base import EntryResult, RollKind, RollUnit
from .options import resolve_options


class AngleStyle(enum.Enum):
    DD = "dd"
    DD_MM = "dd_mm"
    DD_MM_SS = "dd_mm_ss"
    DDD = "ddd"
    DDD_MM = "ddd_mm"
    DDD_MM_SS = "ddd_mm_ss"

    @property
    def is_latitude(self) -> bool:
        return self in (AngleStyle.DD, AngleStyle.DD_MM, AngleStyle.DD_MM_SS)

    @property
    def sub_fields(self) -> int:
        if self in (AngleStyle.DD_MM_SS, AngleStyle.DDD_MM_SS):
            return 2
        if self in (AngleStyle.DD_MM, AngleStyle.DDD_MM):
            return 1
        return 0


@dataclass(frozen=True, slots=True)
class AngleEditorOptions:
    angle_style: AngleStyle = AngleStyle.DDD_MM_SS
    compass: Union[bool, Tuple[str, str]] = False
    decimal_precision: int = 0
    wrap_around: bool = False
    unsigned: bool = False
    degree_mark: str = "°"
    minute_mark: str = "'"
    second_mark: str = '"'
    decimal: str = "."
    rtl: bool = False
    locale: str = "en"

    def __post_init__(self) -> None:
        if not 0 <= self.decimal_precision <= 6:
            raise OptionsError("decimal_precision", self.decimal_precision, "expected 0 to 6")
        if isinstance(self.compass, (list, tuple)):
            points = tuple(self.compass)
            if len(points) != 2 or not all(points) or points[0] == points[1]:
                raise OptionsError("compass", self.compass, "expected two distinct compass points")
            object.__setattr__(self, "compass", points)
        elif not isinstance(self.compass, bool):
            raise OptionsError("compass", self.compass, "expected a bool or a pair of points")
        if self.compass and self.unsigned:
            raise OptionsError("compass", self.compass, "unsigned angles have no compass")

    @property
    def compass_points(self) -> Optional[Tuple[str, str]]:
        """Negative point first, positive second."""

        if isinstance(self.compass, tuple):
            return self.compass
        if not self.compass:
            return None
        return ("S", "N") if self.angle_style.is_latitude else ("W", "E")

    @classmethod
    def resolve(cls, options: Any = None) -> "AngleEditorOptions":
        return resolve_options(cls, options, {})


_ANGLE_TEXT = (
    r"^(?P<pre>[{points}+-])?\s*"
    r"(?P<d>\d+(?:[.,]\d+)?)\s*(?:[°{dmark}]|\s)?\s*"
    r"(?:(?P<m>\d+(?:[.,]\d+)?)\s*(?:['′{mmark}]|\s)?\s*"
    r"(?:(?P<s>\d+(?:[.,]\d+)?)\s*[\"″{smark}]?)?)?\s*"
    r"(?P<post>[{points}])?$"
)


def _number(text: Optional[str]) -> float:
    return float(text.replace(",", ".")) if text else 0.0


class AngleFieldModel:
    """Field model for the angle editor.

    Internally a value is an integer count of the finest displayed unit
    (seconds, minutes or degrees, times ``10 ** decimal_precision``), which
    keeps rolls exact. ``export`` turns that back into float degrees.
    """

    kind = "angle"
    preferred_roles = ("sec", "min", "deg")
    invalid_text = "Invalid angle"

    def __init__(self, options: Optional[AngleEditorOptions] = None) -> None:
        self.options = options or AngleEditorOptions()
        opts = self.options
        style = opts.angle_style
        self.rtl = opts.rtl
        self.points = opts.compass_points
        self.sub_fields = style.sub_fields
        self.precision = opts.decimal_precision
        self.scale = 60 ** self.sub_fields * 10 ** self.precision
        self.deg_digits = 2 if style.is_latitude else 3

        if style.is_latitude:
            self.low = 0 if opts.unsigned else -90 * self.scale
            self.high = 90 * self.scale
            self.high_inclusive = True
        elif opts.unsigned:
            self.low, self.high, self.high_inclusive = 0, 360 * self.scale, False
        else:
            self.low, self.high, self.high_inclusive = -180 * self.scale, 180 * self.scale, False
        self.wraps = opts.wrap_around and not style.is_latitude

        marks = {"dmark": opts.degree_mark, "mmark": opts.minute_mark, "smark": opts.second_mark}
        letters = "NSEW" + "".join(self.points or ())
        self._text = re.compile(
            _ANGLE_TEXT.format(
                points=re.escape(letters), **{k: re.escape(v) for k, v in marks.items()}
            ),
            re.IGNORECASE,
        )

    @property
    def sign_tokens(self) -> Optional[Tuple[str, str]]:
        if self.points is not None:
            return self.points
        if self.options.unsigned:
            return None
        return ("-", "+")

    def build_steps(self) -> List[FieldStep]:
        opts = self.options
        steps: List[FieldStep] = []
        tokens = self.sign_tokens
        if tokens is not None:
            steps.append(FieldStep(FieldKind.SIGN, "sign", tokens=tokens))
        steps += [FieldStep.digits("deg", self.deg_digits), FieldStep.separator(opts.degree_mark, role="mark")]
        if self.sub_fields >= 1:
            steps += [FieldStep.digits("min", 2), FieldStep.separator(opts.minute_mark, role="mark")]
        if self.sub_fields >= 2:
            steps += [FieldStep.digits("sec", 2), FieldStep.separator(opts.second_mark, role="mark")]
        if self.precision:
            steps[-1:-1] = [FieldStep.separator(opts.decimal), FieldStep.digits("frac", self.precision)]
        return steps

    def coerce(self, value: Any) -> int:
        if isinstance(value, bool):
            raise TypeError("booleans are not angles")
        if isinstance(value, str):
            parsed = self.parse_text(value, 0)
            if parsed is None:
                raise ValueError(f"Unparsable angle {value!r}")
            return parsed
        return round(float(value) * self.scale)

    def export(self, value: int) -> float:
        return value / self.scale

    def _split(self, magnitude: int) -> Tuple[int, int, int, int]:
        rest, frac = divmod(magnitude, 10 ** self.precision)
        sec = minute = 0
        if self.sub_fields >= 2:
            rest, sec = divmod(rest, 60)
        if self.sub_fields >= 1:
            rest, minute = divmod(rest, 60)
        return rest, minute, sec, frac

    def decode(self, value: int, sequence: FieldSequence, into: Dict[int, FieldValue]) -> None:
        deg, minute, sec, frac = self._split(abs(int(value)))
        sign = sequence.find("sign")
        if sign is not None:
            into[sign.index] = sign.tokens[0] if value < 0 else sign.tokens[1]
        sequence.set_digits("deg", deg, into=into)
        sequence.set_digits("min", minute, into=into)
        sequence.set_digits("sec", sec, into=into)
        sequence.set_digits("frac", frac, into=into)

    def encode(
        self, sequence: FieldSequence, values: Dict[int, FieldValue], reference: int = 0
    ) -> int:
        del reference
        magnitude = sequence.get_digits("deg", 0, values)
        if self.sub_fields >= 1:
            magnitude = magnitude * 60 + sequence.get_digits("min", 0, values)
        if self.sub_fields >= 2:
            magnitude = magnitude * 60 + sequence.get_digits("sec", 0, values)
        magnitude = magnitude * 10 ** self.precision + sequence.get_digits("frac", 0, values)
        sign = sequence.find("sign")
        if sign is not None and values.get(sign.index) == sign.tokens[0]:
            return -magnitude
        return magnitude

    def unit_for(self, sequence: FieldSequence, field: Field) -> Optional[RollUnit]:
        del sequence
        if field.role == "sign":
            return RollUnit(RollKind.NEGATE)
        if field.kind is not FieldKind.DIGIT:
            return None
        place = 10 ** (field.width - 1 - field.offset)
        decimals = 10 ** self.precision
        if field.role == "deg":
            return RollUnit(RollKind.STEP, place * 60 ** self.sub_fields * decimals)
        if field.role == "min":
            return RollUnit(RollKind.STEP, place * 60 ** (self.sub_fields - 1) * decimals)
        if field.role == "sec":
            return RollUnit(RollKind.STEP, place * decimals)
        if field.role == "frac":
            return RollUnit(RollKind.STEP, place)
        return None

    def shift(self, value: int, unit: RollUnit, direction: int) -> int:
        if unit.kind is RollKind.NEGATE:
            return -int(value)
        return int(value) + unit.amount * direction

    def wrap(self, value: int) -> Optional[int]:
        if not self.wraps:
            return None
        span = 360 * self.scale
        return (int(value) - self.low) % span + self.low

    def _domain_check(self, value: int) -> int:
        if value < self.low:
            return -1
        if value > self.high or (value == self.high and not self.high_inclusive):
            return 1
        return 0

    def parse_limit(self, spec: Any, side: LimitSide) -> Optional[BoundsLimit]:
        return BoundsLimit.numeric(spec, side)

    def range_check(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> int:
        domain = self._domain_check(value)
        if domain:
            return domain
        degrees = self.export(value)
        if low is not None and low.violated_by(degrees):
            return -1
        if high is not None and high.violated_by(degrees):
            return 1
        return 0

    def clamp(self, value: int, limit: BoundsLimit) -> int:
        del value
        return round((limit.resolved or 0.0) * self.scale)

    def validation(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> Optional[Dict[str, Any]]:
        domain = self._domain_check(value)
        if domain < 0:
            return {"min": {"message": f"Angle must be at least {self.export(self.low):g}°"}}
        if domain > 0:
            relation = "at most" if self.high_inclusive else "less than"
            return {"max": {"message": f"Angle must be {relation} {self.export(self.high):g}°"}}
        degrees = self.export(value)
        if low is not None and low.violated_by(degrees):
            return {"min": {"message": f"Angle must be at least {low.text}°"}}
        if high is not None and high.violated_by(degrees):
            return {"max": {"message": f"Angle must be at most {high.text}°"}}
        return None

    def accepts_token_key(self, field: Field, key: str) -> bool:
        if field.role != "sign":
            return False
        lowered = key.lower()
        return lowered in ("-", "+", "=", " ") or lowered in (t.lower() for t in field.tokens)

    def token_for_key(self, field: Field, current: FieldValue, key: str) -> Optional[str]:
        del current
        if field.role != "sign":
            return None
        negative, positive = field.tokens
        lowered = key.lower()
        if lowered in ("-", negative.lower()):
            return negative
        if lowered in ("+", "=", " ", positive.lower()):
            return positive
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
        del field, reference, low, high
        if sequence.get_digits("min", 0, values) > 59 or sequence.get_digits("sec", 0, values) > 59:
            return EntryResult.reject("field out of range")
        value = self.encode(sequence, values)
        if self._domain_check(value):
            return EntryResult.reject("angle out of range")
        return EntryResult(accepted=True, value=value)

    def parse_text(self, text: str, reference: int) -> Optional[int]:
        """Parse decimal degrees or degrees/minutes/seconds text."""

        del reference
        match = self._text.match(text.strip())
        if match is None:
            return None
        parts = match.groupdict()
        minutes, seconds = _number(parts["m"]), _number(parts["s"])
        if minutes >= 60 or seconds >= 60:
            return None
        if parts["pre"] and parts["post"]:
            return None

        degrees = _number(parts["d"]) + minutes / 60 + seconds / 3600
        marker = (parts["pre"] or parts["post"] or "").upper()
        negatives = {"-", "S", "W"}
        if self.points is not None:
            negatives = {"-", self.points[0].upper()}
        if marker in negatives:
            degrees = -degrees
        return round(degrees * self.scale)


__all__ = ["AngleEditorOptions", "AngleFieldModel", "AngleStyle"]
