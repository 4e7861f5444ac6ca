"""Editing verbs dispatched by the input router."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from segment_engine.keymaps.models import KeyStroke
    from segment_engine.engine.editor import SegmentEditor
    from segment_engine.engine.roll import RollOutcome


class InputAction(enum.Enum):
    """Built-in editing verbs; each value is the id of its registered action."""

    MOVE_LEFT = "cursor.left"
    MOVE_RIGHT = "cursor.right"
    CURSOR_FORWARD = "cursor.forward"
    CURSOR_BACKWARD = "cursor.backward"
    ROLL_UP = "roll.up"
    ROLL_DOWN = "roll.down"
    DIGIT_ENTRY = "digit.entry"
    COPY = "clipboard.copy"
    PASTE = "clipboard.paste"
    CUSTOM = "custom"
    NONE = "none"

    @classmethod
    def for_action(cls, action_id: str) -> "InputAction":
        try:
            return cls(action_id)
        except ValueError:
            return cls.CUSTOM


@dataclass(slots=True)
class InputContext:
    """What an action sees: the editor plus the host's clipboard hooks."""

    editor: "SegmentEditor"
    clipboard_sink: Optional[Callable[[str], None]] = None
    clipboard_source: Optional[Callable[[], Optional[str]]] = None


@dataclass(frozen=True, slots=True)
class InputResult:
    action: InputAction
    consumed: bool = True
    status: str = ""
    text: Optional[str] = None
    outcome: Optional["RollOutcome"] = None


def roll_up(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    outcome = context.editor.roll(1)
    return InputResult(InputAction.ROLL_UP, status=outcome.status.value, outcome=outcome)


def roll_down(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    outcome = context.editor.roll(-1)
    return InputResult(InputAction.ROLL_DOWN, status=outcome.status.value, outcome=outcome)


def move_left(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    context.editor.move_cursor(-1)
    return InputResult(InputAction.MOVE_LEFT, status="moved")


def move_right(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    context.editor.move_cursor(1)
    return InputResult(InputAction.MOVE_RIGHT, status="moved")


def cursor_forward(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    context.editor.move_cursor(1, logical=True)
    return InputResult(InputAction.CURSOR_FORWARD, status="moved")


def cursor_backward(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    context.editor.move_cursor(-1, logical=True)
    return InputResult(InputAction.CURSOR_BACKWARD, status="moved")


def enter_key(context: InputContext, stroke: KeyStroke) -> InputResult:
    outcome = context.editor.type_key(stroke.key)
    return InputResult(InputAction.DIGIT_ENTRY, status=outcome.status.value, outcome=outcome)


def copy_value(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    text = context.editor.copy_text()
    if context.clipboard_sink is not None:
        context.clipboard_sink(text)
    return InputResult(InputAction.COPY, status="copied", text=text)


def paste_value(context: InputContext, stroke: KeyStroke) -> InputResult:
    del stroke
    editor = context.editor
    if context.clipboard_source is None:
        editor.request_paste()
        return InputResult(InputAction.PASTE, status="prompt")
    text = context.clipboard_source()
    if text is None:
        return InputResult(InputAction.PASTE, status="empty")
    accepted = editor.paste_text(text)
    return InputResult(InputAction.PASTE, status="pasted" if accepted else "rejected", text=text)


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
