"""Host input routing: keys, spinners and touch gestures."""

from .router import (
    IGNORED_KEYS,
    KEY_REPEAT_DELAY_MS,
    KEY_REPEAT_RATE_MS,
    InputAction,
    InputResult,
    InputRouter,
)

__all__ = [
    "IGNORED_KEYS",
    "KEY_REPEAT_DELAY_MS",
    "KEY_REPEAT_RATE_MS",
    "InputAction",
    "InputResult",
    "InputRouter",
]
