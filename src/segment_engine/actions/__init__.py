"""Editing verbs reused by every editor."""

from .core import (
    InputAction,
    InputContext,
    InputResult,
    copy_value,
    cursor_backward,
    cursor_forward,
    enter_key,
    move_left,
    move_right,
    paste_value,
    roll_down,
    roll_up,
)

__all__ = [
    "InputAction",
    "InputContext",
    "InputResult",
    "copy_value",
    "cursor_backward",
    "cursor_forward",
    "enter_key",
    "move_left",
    "move_right",
    "paste_value",
    "roll_down",
    "roll_up",
]
