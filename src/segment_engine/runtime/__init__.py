"""Telemetry, timers and the cross-editor broadcast."""

from .broadcast import HEADER_DRAG, PASTE_PROMPT, EditorBroadcast
from .timers import FLASH, REPEAT, SWIPE, TimerSlots

__all__ = [
    "EditorBroadcast",
    "HEADER_DRAG",
    "PASTE_PROMPT",
    "TimerSlots",
    "FLASH",
    "REPEAT",
    "SWIPE",
]
