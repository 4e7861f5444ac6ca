"""Polled per-editor timers: one pending timer per category."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

REPEAT = "repeat"
FLASH = "flash"
SWIPE = "swipe"

CATEGORIES = (REPEAT, FLASH, SWIPE)

Clock = Callable[[], float]


@dataclass
class PendingTimer:
    deadline: float
    interval_ms: Optional[int]
    callback: Callable[[], None]
    generation: int


class TimerSlots:
    """Owns the repeat/flash/swipe timers of a single editor.

    Starting a timer replaces whatever was pending in that category, and
    cancelling an idle category is a no-op. Nothing runs on its own: the host
    calls ``process`` from its event loop (or a test advances a fake clock).
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or time.monotonic
        self._pending: Dict[str, PendingTimer] = {}
        self._generation = 0

    def now(self) -> float:
        return self._clock()

    def start(
        self,
        category: str,
        delay_ms: int,
        callback: Callable[[], None],
        *,
        interval_ms: Optional[int] = None,
    ) -> None:
        if category not in CATEGORIES:
            raise KeyError(f"Unknown timer category '{category}'")
        self._generation += 1
        self._pending[category] = PendingTimer(
            deadline=self._clock() + delay_ms / 1000.0,
            interval_ms=interval_ms,
            callback=callback,
            generation=self._generation,
        )

    def cancel(self, category: str) -> None:
        self._pending.pop(category, None)

    def cancel_all(self) -> None:
        self._pending.clear()

    def active(self, category: str) -> bool:
        return category in self._pending

    def process(self) -> List[str]:
        """Fire every expired timer once; return the categories that fired."""

        now = self._clock()
        fired: List[str] = []
        for category, timer in list(self._pending.items()):
            current = self._pending.get(category)
            # An earlier callback in this pass may have cancelled or replaced it.
            if current is None or current.generation != timer.generation:
                continue
            if timer.deadline > now:
                continue
            if timer.interval_ms:
                timer.deadline = now + timer.interval_ms / 1000.0
            else:
                self._pending.pop(category, None)
            timer.callback()
            fired.append(category)
        return fired


__all__ = [
    "CATEGORIES",
    "FLASH",
    "REPEAT",
    "SWIPE",
    "Clock",
    "PendingTimer",
    "TimerSlots",
]
