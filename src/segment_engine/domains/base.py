"""Field-model strategy interface shared by the time and angle domains."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from segment_engine.bounds.calendar import CalendarField
from segment_engine.bounds.limit import BoundsLimit, LimitSide
from segment_engine.fields.models import Field, FieldKind, FieldStep, FieldValue
from segment_engine.fields.sequence import FieldSequence


class RollKind(enum.Enum):
    STEP = "step"
    NEGATE = "negate"
    ERA = "era"
    MERIDIEM = "meridiem"


@dataclass(frozen=True, slots=True)
class RollUnit:
    """What one tick on a field means for the composite value."""

    kind: RollKind
    amount: int = 0
    calendar_field: Optional[CalendarField] = None


@dataclass(frozen=True, slots=True)
class EntryResult:
    """Outcome of re-deriving a value after a typed digit or token."""

    accepted: bool
    value: Optional[int] = None
    normalized: bool = False
    reason: str = ""

    @classmethod
    def reject(cls, reason: str) -> "EntryResult":
        return cls(accepted=False, reason=reason)


class FieldModel(Protocol):
    """Domain strategy plugged into the generic editor engine.

    Values passed through the engine are integers in the model's finest
    resolution: epoch milliseconds for time, scaled angle units for angles.
    ``export``/``coerce`` convert to and from the public representation.
    """

    kind: str
    preferred_roles: Sequence[str]
    rtl: bool
    invalid_text: str

    def build_steps(self) -> List[FieldStep]: ...

    def coerce(self, value: Any) -> int: ...

    def export(self, value: int) -> Any: ...

    def decode(self, value: int, sequence: FieldSequence, into: Dict[int, FieldValue]) -> None: ...

    def encode(
        self, sequence: FieldSequence, values: Dict[int, FieldValue], reference: int = 0
    ) -> int: ...

    def unit_for(self, sequence: FieldSequence, field: Field) -> Optional[RollUnit]: ...

    def shift(self, value: int, unit: RollUnit, direction: int) -> int: ...

    def wrap(self, value: int) -> Optional[int]: ...

    def parse_limit(self, spec: Any, side: LimitSide) -> Optional[BoundsLimit]: ...

    def range_check(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> int: ...

    def clamp(self, value: int, limit: BoundsLimit) -> int: ...

    def token_for_key(self, field: Field, current: FieldValue, key: str) -> Optional[str]: ...

    def accepts_token_key(self, field: Field, key: str) -> bool: ...

    def enter(
        self,
        sequence: FieldSequence,
        values: Dict[int, FieldValue],
        field: Field,
        reference: int,
        low: Optional[BoundsLimit],
        high: Optional[BoundsLimit],
    ) -> EntryResult: ...

    def parse_text(self, text: str, reference: int) -> Optional[int]: ...

    def validation(
        self, value: int, low: Optional[BoundsLimit], high: Optional[BoundsLimit]
    ) -> Optional[Dict[str, Any]]: ...


def layout_pattern(sequence: FieldSequence) -> "re.Pattern[str]":
    """A regex matching text rendered from ``sequence``, one group per field."""

    parts: List[str] = []
    for field in sequence:
        if field.hidden:
            continue
        name = f"f{field.index}"
        if field.kind is FieldKind.DIGIT:
            parts.append(rf"(?P<{name}>\d)")
        elif field.kind in (FieldKind.SIGN, FieldKind.TOKEN):
            options = "|".join(re.escape(token) for token in field.tokens if token)
            parts.append(rf"\s*(?P<{name}>{options})\s*")
        elif field.kind is FieldKind.INDICATOR:
            parts.append(rf"(?P<{name}>.*?)")
        else:
            text = field.text.strip()
            parts.append(rf"\s*{re.escape(text)}\s*" if text else r"\s*")
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE)


def parse_layout(text: str, sequence: FieldSequence) -> Optional[Dict[int, FieldValue]]:
    """Split ``text`` into field values using the sequence's own layout."""

    match = layout_pattern(sequence).match(text.strip())
    if match is None:
        return None

    values = sequence.snapshot()
    for field in sequence:
        if field.hidden or not field.editable:
            continue
        raw = match.group(f"f{field.index}")
        if field.kind is FieldKind.DIGIT:
            values[field.index] = int(raw)
        else:
            for token in field.tokens:
                if token.lower() == raw.lower():
                    values[field.index] = token
                    break
    return values


__all__ = [
    "EntryResult",
    "FieldModel",
    "RollKind",
    "RollUnit",
    "layout_pattern",
    "parse_layout",
]
