"""Generic segmented editor parameterised by a field-model strategy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from segment_engine.bounds.calendar import CalendarService
from segment_engine.bounds.limit import BoundsLimit, LimitSide
from segment_engine.domains.angle import AngleEditorOptions, AngleFieldModel
from segment_engine.domains.base import FieldModel, parse_layout
from segment_engine.domains.time import TimeEditorOptions, TimeFieldModel
from segment_engine.fields.models import NO_SELECTION, FieldKind, FieldValue
from segment_engine.fields.sequence import COMMITTED, FieldSequence
from segment_engine.runtime import telemetry
from segment_engine.runtime.broadcast import HEADER_DRAG, PASTE_PROMPT, EditorBroadcast
from segment_engine.runtime.timers import Clock, TimerSlots

from .feedback import FeedbackState
from .roll import RollEngine, RollOutcome, RollStatus
from .swipe import SwipePredictor

ModelFactory = Callable[[Any], FieldModel]

EVENTS = (
    "value.change",
    "value.touched",
    "value.validity",
    "feedback.state",
    "selection.change",
    "swipe.preview",
    "paste.prompt",
)


class EditorBus:
    """Minimal event bus editors use to notify their host."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


@dataclass(frozen=True, slots=True)
class FieldView:
    index: int
    kind: FieldKind
    role: str
    text: str
    selected: bool
    editable: bool


@dataclass(frozen=True, slots=True)
class EditorSnapshot:
    """Everything a renderer needs for one frame."""

    text: str
    fields: Tuple[FieldView, ...]
    selection: int
    value: Any
    feedback: str
    out_of_range: bool
    validation: Optional[Dict[str, Any]]


class SegmentEditor:
    """Owns one value, its field sequence, bounds, feedback and timers."""

    def __init__(
        self,
        model_factory: ModelFactory,
        *,
        options: Any = None,
        value: Any = None,
        min: Any = None,
        max: Any = None,
        broadcast: Optional[EditorBroadcast] = None,
        clock: Optional[Clock] = None,
        disabled: bool = False,
        view_only: bool = False,
        name: Optional[str] = None,
    ) -> None:
        self._model_factory = model_factory
        self.model: FieldModel = model_factory(options)
        self.name = name or self.model.kind
        self.bus = EditorBus()
        self.timers = TimerSlots(clock)
        self.feedback = FeedbackState(self.timers, on_change=self._feedback_changed)
        self.sequence = FieldSequence(rtl=self.model.rtl)
        self.rolls = RollEngine(self)
        self.swipe = SwipePredictor(self)
        self.logger = telemetry.get_logger("segment_engine.editor")

        self._value = 0
        self._min_spec: Any = None
        self._max_spec: Any = None
        self.low: Optional[BoundsLimit] = None
        self.high: Optional[BoundsLimit] = None
        self.out_of_range = False
        self._validation: Optional[Dict[str, Any]] = None
        self._focused = False
        self.paste_prompt = False
        self.header_drag = False
        self.disposed = False

        self.feedback.disabled = disabled
        self.feedback.view_only = view_only
        if min is not None:
            self.low = self.model.parse_limit(min, LimitSide.LOW)
            self._min_spec = min
        if max is not None:
            self.high = self.model.parse_limit(max, LimitSide.HIGH)
            self._max_spec = max
        if value is not None:
            self._value = self.model.coerce(value)
        self._rebuild()

        self.broadcast = broadcast
        if broadcast is not None:
            broadcast.register(self)

    @classmethod
    def time(
        cls,
        options: Any = None,
        *,
        calendar: Optional[CalendarService] = None,
        **kwargs: Any,
    ) -> "SegmentEditor":
        def factory(opts: Any) -> FieldModel:
            return TimeFieldModel(TimeEditorOptions.resolve(opts), calendar=calendar)

        return cls(factory, options=options, **kwargs)

    @classmethod
    def angle(cls, options: Any = None, **kwargs: Any) -> "SegmentEditor":
        def factory(opts: Any) -> FieldModel:
            return AngleFieldModel(AngleEditorOptions.resolve(opts))

        return cls(factory, options=options, **kwargs)

    # Configuration

    @property
    def options(self) -> Any:
        return getattr(self.model, "options", None)

    @options.setter
    def options(self, options: Any) -> None:
        model = self._model_factory(options)
        if getattr(model, "options", None) == self.options:
            return
        self.model = model
        self.low = model.parse_limit(self._min_spec, LimitSide.LOW)
        self.high = model.parse_limit(self._max_spec, LimitSide.HIGH)
        self._rebuild()

    def _rebuild(self) -> None:
        with telemetry.span(
            "editor::rebuild",
            component="segment_engine.editor",
            metadata={"editor": self.name, "kind": self.model.kind},
        ) as handle:
            self.swipe.cancel()
            self.rolls.clear_flip()
            self.sequence.rtl = self.model.rtl
            self.sequence.build(self.model.build_steps(), preferred=self.model.preferred_roles)
            handle.add_metadata("fields", len(self.sequence))
            self._refresh()
        telemetry.record_event(
            "editor.rebuild",
            data={"editor": self.name, "fields": len(self.sequence)},
            logger_name="segment_engine.editor",
        )

    @property
    def min(self) -> Any:
        return self._min_spec

    @min.setter
    def min(self, spec: Any) -> None:
        self.low = self.model.parse_limit(spec, LimitSide.LOW)
        self._min_spec = spec
        self._refresh()

    @property
    def max(self) -> Any:
        return self._max_spec

    @max.setter
    def max(self, spec: Any) -> None:
        self.high = self.model.parse_limit(spec, LimitSide.HIGH)
        self._max_spec = spec
        self._refresh()

    # Value

    @property
    def raw_value(self) -> int:
        return self._value

    @property
    def value(self) -> Any:
        return self.model.export(self._value)

    @value.setter
    def value(self, value: Any) -> None:
        self.rolls.clear_flip()
        self._set_value(self.model.coerce(value))

    def commit(self, value: int, *, source: str) -> None:
        """Settle ``value`` as the new committed value."""

        self.rolls.clear_flip()
        changed = self._set_value(value)
        telemetry.record_event(
            "editor.commit",
            data={"editor": self.name, "source": source, "value": value, "changed": changed},
            logger_name="segment_engine.editor",
        )

    def _set_value(self, value: int) -> bool:
        changed = value != self._value
        self._value = value
        self._refresh()
        if changed:
            self.bus.emit("value.change", self.value)
        return changed

    def range_check(self, value: int) -> int:
        return self.model.range_check(value, self.low, self.high)

    def _refresh(self) -> None:
        values = self.sequence.values(COMMITTED)
        self.model.decode(self._value, self.sequence, values)
        self.rolls.restore_flip(values)
        self.out_of_range = self.range_check(self._value) != 0
        validation = self.validate()
        if validation != self._validation:
            self._validation = validation
            self.bus.emit("value.validity", validation)

    def validate(self) -> Optional[Dict[str, Any]]:
        return self.model.validation(self._value, self.low, self.high)

    # Access and focus

    @property
    def disabled(self) -> bool:
        return self.feedback.disabled

    @disabled.setter
    def disabled(self, disabled: bool) -> None:
        self.feedback.disabled = disabled
        if disabled:
            self._cancel_interaction()
        self.feedback.refresh()

    @property
    def view_only(self) -> bool:
        return self.feedback.view_only

    @view_only.setter
    def view_only(self, view_only: bool) -> None:
        self.feedback.view_only = view_only
        if view_only:
            self._cancel_interaction()
        self.feedback.refresh()

    @property
    def editable(self) -> bool:
        return not self.disabled and not self.view_only and not self.disposed

    def focus(self) -> None:
        self._focused = True

    def blur(self) -> None:
        self._cancel_interaction()
        if self._focused:
            self._focused = False
            self.bus.emit("value.touched", self.value)

    def _cancel_interaction(self) -> None:
        self.swipe.cancel()
        self.timers.cancel("repeat")

    # Selection and editing

    def select(self, index: int) -> bool:
        previous = self.sequence.selection
        if not self.sequence.select(index):
            return False
        if previous != index:
            self.bus.emit("selection.change", index)
        return True

    def move_cursor(self, direction: int, *, logical: bool = False) -> int:
        previous = self.sequence.selection
        selection = self.sequence.move_cursor(direction, logical=logical)
        if selection != previous:
            self.bus.emit("selection.change", selection)
        return selection

    def roll(self, direction: int, index: Optional[int] = None) -> RollOutcome:
        if not self.editable:
            return RollOutcome(RollStatus.IGNORED)
        target = self.sequence.selection if index is None else index
        return self.rolls.roll(target, direction, commit=True)

    def type_key(self, key: str) -> RollOutcome:
        if not self.editable:
            return RollOutcome(RollStatus.IGNORED)
        return self.rolls.set_field(self.sequence.selection, key)

    # Clipboard

    def copy_text(self) -> str:
        if self.out_of_range:
            return self.model.invalid_text
        return self.sequence.render(COMMITTED)

    def parse(self, text: str) -> Optional[int]:
        """Parse text with this editor's layout, then the model's fallbacks."""

        values = parse_layout(text, self.sequence)
        if values is not None:
            value = self.model.encode(self.sequence, values, self._value)
            decoded: Dict[int, FieldValue] = dict(values)
            self.model.decode(value, self.sequence, decoded)
            if all(decoded.get(f.index) == values.get(f.index) for f in self.sequence if f.editable):
                return value
        return self.model.parse_text(text, self._value)

    def paste_text(self, text: str) -> bool:
        if not self.editable:
            return False
        with telemetry.span(
            "editor::paste",
            component="segment_engine.editor",
            metadata={"editor": self.name, "length": len(text)},
        ) as handle:
            value = self.parse(text)
            if value is None:
                handle.reject("unparsable")
                self.feedback.error()
                return False

            verdict = self.range_check(value)
            if verdict:
                limit = self.low if verdict < 0 else self.high
                wrapped = self.model.wrap(value)
                if wrapped is not None and not self.range_check(wrapped):
                    value = wrapped
                elif limit is not None:
                    value = self.model.clamp(value, limit)
                else:
                    handle.reject("out_of_domain")
                    self.feedback.error()
                    return False
                self.commit(value, source="paste")
                self.feedback.warning()
            else:
                self.commit(value, source="paste")
                self.feedback.confirm()
            return True

    def request_paste(self) -> None:
        """Ask the host for clipboard text; the host answers via ``complete_paste``."""

        if not self.editable:
            return
        if self.broadcast is not None:
            self.broadcast.acquire(PASTE_PROMPT, self)
        self.paste_prompt = True
        self.bus.emit("paste.prompt", True)

    def complete_paste(self, text: Optional[str]) -> bool:
        self._end_paste_prompt()
        if text is None:
            return False
        return self.paste_text(text)

    def _end_paste_prompt(self) -> None:
        if self.broadcast is not None:
            self.broadcast.release(PASTE_PROMPT, self)
        if self.paste_prompt:
            self.paste_prompt = False
            self.bus.emit("paste.prompt", False)

    def begin_header_drag(self) -> None:
        if self.broadcast is not None:
            self.broadcast.acquire(HEADER_DRAG, self)
        self.header_drag = True

    def end_header_drag(self) -> None:
        if self.broadcast is not None:
            self.broadcast.release(HEADER_DRAG, self)
        self.header_drag = False

    # Broadcast membership

    def apply_theme(self, dark: bool) -> None:
        if self.feedback.dark != dark:
            self.feedback.dark = dark
            self.feedback.refresh()

    def release_singleton(self, name: str) -> None:
        if name == PASTE_PROMPT and self.paste_prompt:
            self.paste_prompt = False
            self.bus.emit("paste.prompt", False)
        elif name == HEADER_DRAG:
            self.header_drag = False

    def _feedback_changed(self, display: str) -> None:
        self.bus.emit("feedback.state", display)

    # Lifecycle

    def process_timers(self) -> List[str]:
        return self.timers.process()

    def dispose(self) -> None:
        if self.disposed:
            return
        self.swipe.cancel()
        self.timers.cancel_all()
        if self.broadcast is not None:
            self.broadcast.unregister(self)
        self.disposed = True

    def snapshot(self) -> EditorSnapshot:
        selection = self.sequence.selection
        views = tuple(
            FieldView(
                index=field.index,
                kind=field.kind,
                role=field.role,
                text=self.sequence.text_of(field.index),
                selected=field.index == selection,
                editable=field.editable,
            )
            for field in self.sequence.display_order
        )
        return EditorSnapshot(
            text=self.copy_text(),
            fields=views,
            selection=selection if selection is not None else NO_SELECTION,
            value=self.value,
            feedback=self.feedback.display,
            out_of_range=self.out_of_range,
            validation=self._validation,
        )


__all__ = [
    "EVENTS",
    "EditorBus",
    "EditorSnapshot",
    "FieldView",
    "SegmentEditor",
]
