"""Swipe previews and drag smoothing for touch gestures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from segment_engine.fields.models import NO_SELECTION
from segment_engine.fields.sequence import COMMITTED, PREVIEW_DOWN, PREVIEW_UP
from segment_engine.runtime.timers import SWIPE

from .roll import RollOutcome, RollStatus

if TYPE_CHECKING:
    from .editor import SegmentEditor

DIGIT_SWIPE_THRESHOLD = 6
MIN_DIGIT_SWIPE = 0.33
MAX_DIGIT_SWIPE = 0.9
MIN_SWIPE_TIME_MS = 200
SWIPE_SMOOTHING_WINDOW_MS = 500
SWIPE_SAMPLE_INTERVAL_MS = 50


@dataclass(frozen=True, slots=True)
class SwipeSample:
    elapsed_ms: float
    delta: float


class SwipePredictor:
    """Non-committing previews plus drag-to-offset smoothing.

    ``begin`` primes previews for a field and starts the sampling timer;
    ``move`` feeds raw pointer displacement; ``resolve`` commits a roll when
    the displacement passed the threshold, otherwise the gesture was a tap.
    """

    def __init__(self, editor: "SegmentEditor") -> None:
        self._editor = editor
        self.index = NO_SELECTION
        self.field_height = 0.0
        self.offset = 0.0
        self.last_delta = 0.0
        self.samples: List[SwipeSample] = []
        self._started: Optional[float] = None

    @property
    def active(self) -> bool:
        return self._started is not None

    def prime(self, index: int) -> None:
        editor = self._editor
        sequence = editor.sequence
        self.index = index
        editor.rolls.roll(index, 1, commit=False)
        editor.rolls.roll(index, -1, commit=False)

        committed = sequence.values(COMMITTED)
        up = sequence.values(PREVIEW_UP)
        down = sequence.values(PREVIEW_DOWN)
        for field in sequence:
            if field.index == index or not field.editable:
                continue
            value = committed.get(field.index)
            if up.get(field.index) == value and down.get(field.index) == value:
                up.pop(field.index, None)
                down.pop(field.index, None)
        self._announce()

    def begin(self, index: int, field_height: float) -> bool:
        editor = self._editor
        if not editor.editable:
            return False
        self.cancel()
        if not editor.select(index):
            return False
        self.index = index
        self.field_height = float(field_height)
        self._started = editor.timers.now()
        self.prime(index)
        editor.timers.start(
            SWIPE,
            SWIPE_SAMPLE_INTERVAL_MS,
            self._resample,
            interval_ms=SWIPE_SAMPLE_INTERVAL_MS,
        )
        return True

    def move(self, raw_delta: float) -> float:
        if self._started is None:
            return 0.0
        elapsed = (self._editor.timers.now() - self._started) * 1000.0
        return self.map_drag_to_offset(raw_delta, elapsed, self.field_height)

    def map_drag_to_offset(self, raw_delta: float, elapsed_ms: float, field_height: float) -> float:
        """Smoothed offset for ``raw_delta``; zero until the gesture is long enough."""

        self.last_delta = raw_delta
        self.samples.append(SwipeSample(elapsed_ms, raw_delta))
        cutoff = elapsed_ms - SWIPE_SMOOTHING_WINDOW_MS
        self.samples = [sample for sample in self.samples if sample.elapsed_ms >= cutoff]

        if elapsed_ms < MIN_SWIPE_TIME_MS:
            offset = 0.0
        else:
            mean = sum(sample.delta for sample in self.samples) / len(self.samples)
            limit = MAX_DIGIT_SWIPE * field_height
            offset = max(-limit, min(limit, mean))

        if offset != self.offset:
            self.offset = offset
            self._announce()
        return offset

    def _resample(self) -> None:
        if self.active:
            self.move(self.last_delta)

    def resolve(self) -> RollOutcome:
        editor = self._editor
        index = self.index
        delta = self.last_delta
        threshold = max(MIN_DIGIT_SWIPE * self.field_height, DIGIT_SWIPE_THRESHOLD)
        outcome = RollOutcome(RollStatus.IGNORED)

        if self.active and abs(delta) >= threshold:
            direction = 1 if delta > 0 else -1
            preview = editor.sequence.values(PREVIEW_UP if direction > 0 else PREVIEW_DOWN)
            if preview.get(index) is None:
                editor.feedback.error()
                outcome = RollOutcome(RollStatus.REJECTED)
            else:
                outcome = editor.rolls.roll(index, direction, commit=True)

        self._finish()
        return outcome

    def cancel(self) -> None:
        if self.active or self.index != NO_SELECTION:
            self._finish()

    def _finish(self) -> None:
        editor = self._editor
        editor.timers.cancel(SWIPE)
        editor.sequence.clear_previews()
        self.samples.clear()
        self.offset = 0.0
        self.last_delta = 0.0
        self.index = NO_SELECTION
        self._started = None
        self._announce()

    def _announce(self) -> None:
        editor = self._editor
        payload = None
        if self.index != NO_SELECTION:
            payload = {
                "index": self.index,
                "offset": self.offset,
                "up": dict(editor.sequence.values(PREVIEW_UP)),
                "down": dict(editor.sequence.values(PREVIEW_DOWN)),
            }
        editor.bus.emit("swipe.preview", payload)


__all__ = [
    "DIGIT_SWIPE_THRESHOLD",
    "MAX_DIGIT_SWIPE",
    "MIN_DIGIT_SWIPE",
    "MIN_SWIPE_TIME_MS",
    "SWIPE_SAMPLE_INTERVAL_MS",
    "SWIPE_SMOOTHING_WINDOW_MS",
    "SwipePredictor",
    "SwipeSample",
]
