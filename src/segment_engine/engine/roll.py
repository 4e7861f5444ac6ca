"""Roll arithmetic: ticks, wraparound, bounds and typed entry."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from segment_engine.domains.base import RollKind
from segment_engine.fields.models import NO_SELECTION, Field, FieldKind, FieldValue
from segment_engine.fields.sequence import COMMITTED, PREVIEW_DOWN, PREVIEW_UP
from segment_engine.runtime import telemetry

if TYPE_CHECKING:
    from .editor import SegmentEditor

_DIGITS = "0123456789"


class RollStatus(enum.Enum):
    APPLIED = "applied"
    WRAPPED = "wrapped"
    CLAMPED = "clamped"
    FORCED = "forced"
    FLIPPED = "flipped"
    REJECTED = "rejected"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class RollOutcome:
    status: RollStatus
    value: Optional[int] = None

    @property
    def changed(self) -> bool:
        return self.status in (
            RollStatus.APPLIED,
            RollStatus.WRAPPED,
            RollStatus.CLAMPED,
            RollStatus.FORCED,
        )


class RollEngine:
    """Applies ticks and typed entries to one editor's value.

    Committing rolls go through ``editor.commit``. Preview rolls decode into
    ``up``/``down`` maps and leave the committed value and fields alone.
    """

    def __init__(self, editor: "SegmentEditor") -> None:
        self._editor = editor
        self._flip: Optional[tuple[int, FieldValue]] = None

    @property
    def pending_flip(self) -> bool:
        return self._flip is not None

    def clear_flip(self) -> None:
        self._flip = None

    def restore_flip(self, values: Dict[int, FieldValue]) -> None:
        """Re-show a sign toggled at zero magnitude after a re-decode."""

        if self._flip is not None:
            index, token = self._flip
            values[index] = token

    def roll(self, index: int, direction: int, *, commit: bool = True) -> RollOutcome:
        editor = self._editor
        sequence = editor.sequence
        if index == NO_SELECTION or direction == 0:
            return RollOutcome(RollStatus.IGNORED)

        field = sequence.field(index)
        unit = editor.model.unit_for(sequence, field)
        if unit is None:
            return RollOutcome(RollStatus.IGNORED)

        direction = 1 if direction > 0 else -1
        target = PREVIEW_UP if direction > 0 else PREVIEW_DOWN
        current = editor.raw_value
        candidate = editor.model.shift(current, unit, direction)

        if unit.kind is RollKind.NEGATE and candidate == current:
            return self._toggle_sign(field, target, commit)

        status = RollStatus.APPLIED
        if editor.range_check(candidate):
            wrapped = editor.model.wrap(candidate)
            if wrapped is not None and not editor.range_check(wrapped):
                candidate, status = wrapped, RollStatus.WRAPPED
            elif commit and editor.out_of_range:
                status = RollStatus.FORCED
            else:
                return self._reject(field, target, commit)

        if not commit:
            self._write_preview(target, candidate)
            return RollOutcome(status, candidate)

        with telemetry.span(
            "roll::commit",
            component="segment_engine.roll",
            metadata={"field": field.role, "direction": direction, "status": status.value},
        ):
            editor.commit(candidate, source="roll")
        if status is RollStatus.WRAPPED:
            editor.feedback.warning()
        elif status is RollStatus.FORCED:
            editor.feedback.error()
        return RollOutcome(status, candidate)

    def _write_preview(self, target: str, value: int) -> None:
        editor = self._editor
        preview = editor.sequence.values(target)
        preview.clear()
        preview.update(editor.sequence.values(COMMITTED))
        editor.model.decode(value, editor.sequence, preview)

    def _reject(self, field: Field, target: str, commit: bool) -> RollOutcome:
        editor = self._editor
        if commit:
            editor.feedback.error()
            telemetry.record_event(
                "roll.rejected",
                data={"field": field.role, "value": editor.raw_value},
                logger_name="segment_engine.roll",
            )
        else:
            preview = editor.sequence.values(target)
            preview.clear()
            preview.update(editor.sequence.values(COMMITTED))
            preview[field.index] = None
        return RollOutcome(RollStatus.REJECTED)

    def _toggle_sign(self, field: Field, target: str, commit: bool) -> RollOutcome:
        editor = self._editor
        sequence = editor.sequence
        token = field.other_token(sequence.value_of(field.index))
        if not commit:
            preview = sequence.values(target)
            preview.clear()
            preview.update(sequence.values(COMMITTED))
            preview[field.index] = token
            return RollOutcome(RollStatus.FLIPPED, editor.raw_value)

        self._set_flip(field, token)
        return RollOutcome(RollStatus.FLIPPED, editor.raw_value)

    def _set_flip(self, field: Field, token: FieldValue) -> None:
        editor = self._editor
        natural: Dict[int, FieldValue] = {}
        editor.model.decode(editor.raw_value, editor.sequence, natural)
        editor.sequence.set_value(field.index, token)
        self._flip = None if natural.get(field.index) == token else (field.index, token)

    def set_field(self, index: int, key: str) -> RollOutcome:
        """Type ``key`` into the field at ``index``."""

        editor = self._editor
        sequence = editor.sequence
        model = editor.model
        if index == NO_SELECTION:
            return RollOutcome(RollStatus.IGNORED)

        field = sequence.field(index)
        original = sequence.value_of(index)
        new: FieldValue
        if field.kind is FieldKind.DIGIT:
            if len(key) != 1 or key not in _DIGITS:
                editor.feedback.error()
                return RollOutcome(RollStatus.REJECTED)
            new = int(key)
        elif field.kind in (FieldKind.SIGN, FieldKind.TOKEN):
            token = model.token_for_key(field, original, key)
            if token is None:
                if not model.accepts_token_key(field, key):
                    editor.feedback.error()
                    return RollOutcome(RollStatus.REJECTED)
                return RollOutcome(RollStatus.UNCHANGED)
            new = token
        else:
            return RollOutcome(RollStatus.IGNORED)

        if new == original and not editor.out_of_range:
            editor.move_cursor(1, logical=True)
            return RollOutcome(RollStatus.UNCHANGED, editor.raw_value)

        values = sequence.snapshot()
        values[index] = new
        result = model.enter(sequence, values, field, editor.raw_value, editor.low, editor.high)
        if not result.accepted or result.value is None:
            editor.feedback.error()
            telemetry.record_event(
                "entry.rejected",
                data={"field": field.role, "key": key, "reason": result.reason},
                logger_name="segment_engine.roll",
            )
            return RollOutcome(RollStatus.REJECTED)

        value = result.value
        warned = result.normalized
        verdict = editor.range_check(value)
        if verdict:
            limit = editor.low if verdict < 0 else editor.high
            if limit is None:
                editor.feedback.error()
                return RollOutcome(RollStatus.REJECTED)
            value = model.clamp(value, limit)
            warned = True

        editor.commit(value, source="entry")
        if field.kind is FieldKind.SIGN and sequence.value_of(index) != new:
            self._set_flip(field, new)
        if warned:
            editor.feedback.warning()
        editor.move_cursor(1, logical=True)
        return RollOutcome(RollStatus.CLAMPED if warned else RollStatus.APPLIED, value)


__all__ = ["RollEngine", "RollOutcome", "RollStatus"]
