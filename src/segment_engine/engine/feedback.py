"""Flash-state machine for error/warning/confirm feedback."""

from __future__ import annotations

from typing import Callable, Optional

from segment_engine.runtime.timers import FLASH, TimerSlots

NORMAL = "normal"
CONFIRM = "confirm"
WARNING = "warning"
ERROR = "error"

PRIORITY = {NORMAL: 0, CONFIRM: 1, WARNING: 2, ERROR: 3}

FLASH_DURATION_MS = 250
LONG_WARNING_DURATION_MS = 2000


class FeedbackState:
    """Single active feedback state backed by the editor's flash timer.

    A flash lasts ``FLASH_DURATION_MS`` (or ``LONG_WARNING_DURATION_MS`` for a
    long warning) and then falls back to ``normal``. A flash of lower priority
    than the one still showing is dropped.
    """

    def __init__(
        self,
        timers: TimerSlots,
        *,
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._timers = timers
        self._on_change = on_change
        self.state = NORMAL
        self.dark = False
        self.disabled = False
        self.view_only = False

    @property
    def display(self) -> str:
        if self.disabled:
            base = "disabled"
        elif self.view_only:
            base = "view-only"
        else:
            base = self.state
        return f"dark-{base}" if self.dark else base

    def flash(self, state: str, *, long: bool = False) -> bool:
        if state not in PRIORITY:
            raise ValueError(f"Unknown feedback state '{state}'")
        if state == NORMAL:
            self.reset()
            return True
        if PRIORITY[state] < PRIORITY[self.state]:
            return False

        duration = LONG_WARNING_DURATION_MS if long and state == WARNING else FLASH_DURATION_MS
        self.state = state
        self._timers.start(FLASH, duration, self._expire)
        self._notify()
        return True

    def error(self) -> bool:
        return self.flash(ERROR)

    def warning(self, *, long: bool = False) -> bool:
        return self.flash(WARNING, long=long)

    def confirm(self) -> bool:
        return self.flash(CONFIRM)

    def reset(self) -> None:
        self._timers.cancel(FLASH)
        if self.state != NORMAL:
            self.state = NORMAL
            self._notify()

    def refresh(self) -> None:
        """Re-announce the display state after theme or access changes."""

        self._notify()

    def _expire(self) -> None:
        self.state = NORMAL
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.display)


__all__ = [
    "CONFIRM",
    "ERROR",
    "FLASH_DURATION_MS",
    "FeedbackState",
    "LONG_WARNING_DURATION_MS",
    "NORMAL",
    "PRIORITY",
    "WARNING",
]
