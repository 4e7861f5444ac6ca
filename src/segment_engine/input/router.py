"""Key classification, auto-repeat, spinner and gesture routing."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Optional, Union

from segment_engine.actions.core import InputAction, InputContext, InputResult
from segment_engine.engine.editor import SegmentEditor
from segment_engine.engine.roll import RollOutcome, RollStatus
from segment_engine.fields.models import FieldKind
from segment_engine.keymaps import (
    EDITOR_SCOPE,
    ActionRef,
    KeymapRegistry,
    KeyStroke,
    load_default_keymaps,
)
from segment_engine.runtime import telemetry
from segment_engine.runtime.timers import REPEAT

KEY_REPEAT_DELAY_MS = 500
KEY_REPEAT_RATE_MS = 100

IGNORED_KEYS = frozenset(
    {"Shift", "Control", "Ctrl", "Alt", "Meta", "Tab", "CapsLock", "Escape", "Enter"}
)
_FUNCTION_KEY = re.compile(r"^F\d{1,2}$")

KeyLike = Union[str, KeyStroke]


class InputRouter:
    """Turns host input events into editor operations.

    Keys resolve to a registered ``ActionRef`` through the keymap registry,
    with token keys on a selected sign or token field taking precedence.
    The action's metadata decides whether it auto-repeats and whether it
    still runs on a view-only editor.
    Holding a key or a spinner button repeats through the editor's single
    ``repeat`` timer.
    """

    def __init__(
        self,
        editor: SegmentEditor,
        *,
        registry: Optional[KeymapRegistry] = None,
        clipboard_sink: Optional[Callable[[str], None]] = None,
        clipboard_source: Optional[Callable[[], Optional[str]]] = None,
    ) -> None:
        self.editor = editor
        if registry is None:
            registry = KeymapRegistry(logger_name="segment_engine.keymaps")
            load_default_keymaps(registry)
        self.registry = registry
        self.context = InputContext(
            editor,
            clipboard_sink=clipboard_sink,
            clipboard_source=clipboard_source,
        )
        self.held: Optional[KeyStroke] = None
        self._held_action: Optional[ActionRef] = None
        self.spinner_direction = 0

    # Classification

    def keymap_context(self) -> Dict[str, bool]:
        editor = self.editor
        selected = editor.sequence.selected
        return {
            "has_selection": selected is not None,
            "rtl": editor.sequence.rtl,
            "view_only": editor.view_only,
            "out_of_range": editor.out_of_range,
            editor.model.kind: True,
        }

    def resolve(self, key: KeyLike, modifiers: Iterable[str] = ()) -> Optional[ActionRef]:
        """Registered action for a key press, or ``None`` when the key does nothing."""

        stroke = _stroke(key, modifiers)
        if stroke.key in IGNORED_KEYS or _FUNCTION_KEY.match(stroke.key):
            return None

        selected = self.editor.sequence.selected
        if (
            stroke.printable
            and selected is not None
            and selected.kind in (FieldKind.SIGN, FieldKind.TOKEN)
            and self.editor.model.accepts_token_key(selected, stroke.key)
        ):
            return self._action(InputAction.DIGIT_ENTRY.value)

        binding = self.registry.lookup(
            stroke,
            scopes=(self.editor.model.kind, EDITOR_SCOPE),
            context=self.keymap_context(),
        )
        if binding is not None:
            return self._action(binding.action_id)

        if stroke.printable:
            return self._action(InputAction.DIGIT_ENTRY.value)
        return None

    def classify(self, key: KeyLike, modifiers: Iterable[str] = ()) -> InputAction:
        action = self.resolve(key, modifiers)
        if action is None:
            return InputAction.NONE
        return InputAction.for_action(action.id)

    def execute(self, action: ActionRef, key: KeyLike) -> InputResult:
        stroke = _stroke(key, ())
        with telemetry.span(
            "input::execute",
            component="segment_engine.input",
            metadata={"action": action.telemetry_name, "key": stroke.token},
        ):
            return action(self.context, stroke)  # type: ignore[return-value]

    def _action(self, action_id: str) -> Optional[ActionRef]:
        try:
            return self.registry.get_action(action_id)
        except KeyError:
            return None

    # Keys

    def press(self, key: KeyLike, modifiers: Iterable[str] = ()) -> InputResult:
        """Handle a key-down; the first press runs immediately."""

        stroke = _stroke(key, modifiers)
        editor = self.editor
        if self.held is not None and self._held_action is not None:
            if stroke == self.held and editor.timers.active(REPEAT):
                kind = InputAction.for_action(self._held_action.id)
                return InputResult(kind, consumed=True, status="held")
            self.cancel_repeat()

        action = self.resolve(stroke)
        if action is None or not self._allowed(action):
            kind = InputAction.NONE if action is None else InputAction.for_action(action.id)
            return InputResult(kind, consumed=False, status="ignored")

        result = self.execute(action, stroke)
        if action.metadata.get("repeat", True):
            self.held = stroke
            self._held_action = action
            editor.timers.start(
                REPEAT,
                KEY_REPEAT_DELAY_MS,
                self._repeat_key,
                interval_ms=KEY_REPEAT_RATE_MS,
            )
        return result

    def release(self, key: KeyLike, modifiers: Iterable[str] = ()) -> None:
        stroke = _stroke(key, modifiers)
        if self.held is not None and stroke.key == self.held.key:
            self.cancel_repeat()

    def cancel_repeat(self) -> None:
        self.editor.timers.cancel(REPEAT)
        self.held = None
        self._held_action = None
        self.spinner_direction = 0

    def _repeat_key(self) -> None:
        action = self._held_action
        if self.held is None or action is None or not self._allowed(action):
            self.cancel_repeat()
            return
        self.execute(action, self.held)

    def _allowed(self, action: ActionRef) -> bool:
        editor = self.editor
        if editor.disabled or editor.disposed:
            return False
        if editor.view_only:
            return bool(action.metadata.get("view_only", False))
        return True

    # Spinner

    def spinner_press(self, direction: int) -> bool:
        """Arm the repeat timer for an up/down spinner button."""

        if not self.editor.editable or direction == 0:
            return False
        self.cancel_repeat()
        self.spinner_direction = 1 if direction > 0 else -1
        self.editor.timers.start(
            REPEAT,
            KEY_REPEAT_DELAY_MS,
            self._repeat_spinner,
            interval_ms=KEY_REPEAT_RATE_MS,
        )
        return True

    def spinner_release(self) -> RollOutcome:
        direction = self.spinner_direction
        if not direction or not self.editor.timers.active(REPEAT):
            return RollOutcome(RollStatus.IGNORED)
        self.cancel_repeat()
        return self.editor.roll(direction)

    def spinner_leave(self) -> None:
        if self.spinner_direction:
            self.cancel_repeat()

    def _repeat_spinner(self) -> None:
        if not self.spinner_direction or not self.editor.editable:
            self.cancel_repeat()
            return
        self.editor.roll(self.spinner_direction)

    # Gestures

    def gesture_begin(self, index: int, field_height: float) -> bool:
        self.cancel_repeat()
        return self.editor.swipe.begin(index, field_height)

    def gesture_move(self, raw_delta: float) -> float:
        return self.editor.swipe.move(raw_delta)

    def gesture_end(self) -> RollOutcome:
        return self.editor.swipe.resolve()

    def gesture_cancel(self) -> None:
        self.editor.swipe.cancel()


def _stroke(key: KeyLike, modifiers: Iterable[str]) -> KeyStroke:
    if isinstance(key, KeyStroke):
        return key
    modifiers = tuple(modifiers)
    if modifiers:
        return KeyStroke(key, modifiers)
    if len(key) > 1 and "+" in key:
        return KeyStroke.parse(key)
    return KeyStroke(key)


__all__ = [
    "IGNORED_KEYS",
    "InputAction",
    "InputResult",
    "InputRouter",
    "KEY_REPEAT_DELAY_MS",
    "KEY_REPEAT_RATE_MS",
]
