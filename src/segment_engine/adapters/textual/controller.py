"""Minimal Textual adapter that wires editor events into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from segment_engine.actions.core import InputAction, InputResult
from segment_engine.engine.editor import EVENTS, EditorSnapshot, SegmentEditor
from segment_engine.input.router import InputRouter
from segment_engine.keymaps import KeymapRegistry

# Textual key names that differ from the router's canonical names.
TEXTUAL_KEYS: Dict[str, str] = {
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "backspace": "Backspace",
    "space": " ",
    "tab": "Tab",
    "escape": "Escape",
    "enter": "Enter",
    "plus": "+",
    "minus": "-",
    "equals_sign": "=",
}

_TEXTUAL_MODIFIERS = {"ctrl": "ctrl", "alt": "alt", "meta": "meta", "shift": "shift"}


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_fields: Callable[[EditorSnapshot], None]
    update_status: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    copy_to_clipboard: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


def normalize_textual_key(
    key: str, character: Optional[str] = None
) -> tuple[str, tuple[str, ...]]:
    """Split a Textual key such as ``ctrl+c`` into a router key and modifiers."""

    modifiers: List[str] = []
    parts = key.split("+")
    while len(parts) > 1 and parts[0] in _TEXTUAL_MODIFIERS:
        modifiers.append(_TEXTUAL_MODIFIERS[parts.pop(0)])
    name = "+".join(parts)
    if name in TEXTUAL_KEYS:
        return TEXTUAL_KEYS[name], tuple(modifiers)
    printable = bool(character) and len(character) == 1 and character.isprintable()
    if printable and set(modifiers) <= {"shift"}:
        return character, ()
    if len(name) > 1 and name.startswith("f") and name[1:].isdigit():
        return name.upper(), tuple(modifiers)
    return name, tuple(modifiers)


class TextualSegmentAdapter:
    """Bridges one SegmentEditor + its bus events to a Textual-friendly surface."""

    def __init__(
        self,
        editor: SegmentEditor,
        hooks: TextualUIHooks,
        *,
        registry: Optional[KeymapRegistry] = None,
    ) -> None:
        self.editor = editor
        self.hooks = hooks
        self.router = InputRouter(
            editor,
            registry=registry,
            clipboard_sink=hooks.copy_to_clipboard,
        )
        stats = self.router.registry.stats()
        self._log_state(
            "keymaps ->",
            actions=stats.action_count,
            bindings=stats.binding_count,
            scopes=stats.scopes,
        )
        self._subscribe_events()
        self._refresh_fields()

    def handle_textual_key(
        self,
        key: str,
        *,
        character: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> InputResult:
        """Translate a Textual key event and dispatch it through the router.

        Terminals report no key-up, so every press is released immediately
        and repeats come from the terminal's own auto-repeat.
        """

        name, parsed = normalize_textual_key(key, character)
        mods = tuple(dict.fromkeys(parsed + tuple(str(m).lower() for m in modifiers)))
        self._log_state("key ->", key=name, mods=mods)
        result = self.router.press(name, mods)
        self.router.release(name, mods)
        if result.status:
            self.hooks.update_status(f"{result.action.value}:{result.status}")
        self._refresh_fields()
        self._log_state("result <-", action=result.action.value, status=result.status)
        return result

    def paste(self, text: str) -> bool:
        if self.editor.view_only or self.editor.disabled:
            return False
        accepted = self.editor.paste_text(text)
        status = "pasted" if accepted else "rejected"
        self.hooks.update_status(f"{InputAction.PASTE.value}:{status}")
        self._refresh_fields()
        return accepted

    def process_timers(self) -> List[str]:
        """Forward expired timers and surface results to the UI."""

        fired = self.editor.process_timers()
        if fired:
            self._log_state("timers ->", fired=fired)
            self._refresh_fields()
        return fired

    def focus(self) -> None:
        self.editor.focus()
        self._refresh_fields()

    def blur(self) -> None:
        self.router.cancel_repeat()
        self.editor.blur()
        self._refresh_fields()

    def _subscribe_events(self) -> None:
        bus = self.editor.bus
        for event in EVENTS:
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)
        if name == "value.validity" and isinstance(payload, dict):
            messages = [str(entry.get("message", "")) for entry in payload.values()]
            self.hooks.update_status("; ".join(m for m in messages if m))

    def _refresh_fields(self) -> None:
        self.hooks.update_fields(self.editor.snapshot())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "editor": self.editor.name,
            "selection": self.editor.sequence.selection,
            "feedback": self.editor.feedback.display,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))


__all__ = ["TEXTUAL_KEYS", "TextualSegmentAdapter", "TextualUIHooks", "normalize_textual_key"]
