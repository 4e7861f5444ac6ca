"""Built-in keymaps shared by every segmented editor."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from segment_engine.actions import core as core_actions
from segment_engine.actions.core import InputAction

from .models import ActionRef, Binding, KeyStroke, WhenClause
from .registry import KeymapRegistry

EDITOR_SCOPE = "editor"

# Action metadata: ``repeat`` (auto-repeat while held, default True) and
# ``view_only`` (still runs on a view-only editor, default False).
DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id=InputAction.ROLL_UP.value,
        handler=core_actions.roll_up,
        description="Roll the selected field up",
    ),
    ActionRef(
        id=InputAction.ROLL_DOWN.value,
        handler=core_actions.roll_down,
        description="Roll the selected field down",
    ),
    ActionRef(
        id=InputAction.MOVE_LEFT.value,
        handler=core_actions.move_left,
        description="Select the field to the left",
    ),
    ActionRef(
        id=InputAction.MOVE_RIGHT.value,
        handler=core_actions.move_right,
        description="Select the field to the right",
    ),
    ActionRef(
        id=InputAction.CURSOR_FORWARD.value,
        handler=core_actions.cursor_forward,
        description="Select the next field in logical order",
    ),
    ActionRef(
        id=InputAction.CURSOR_BACKWARD.value,
        handler=core_actions.cursor_backward,
        description="Select the previous field in logical order",
    ),
    ActionRef(
        id=InputAction.DIGIT_ENTRY.value,
        handler=core_actions.enter_key,
        description="Type a digit or token into the selected field",
    ),
    ActionRef(
        id=InputAction.COPY.value,
        handler=core_actions.copy_value,
        description="Copy the committed value",
        metadata={"repeat": False, "view_only": True},
    ),
    ActionRef(
        id=InputAction.PASTE.value,
        handler=core_actions.paste_value,
        description="Paste clipboard text into the editor",
        metadata={"repeat": False},
    ),
)


def _bind(binding_id: str, key: str, action_id: str, description: str, **extra: object) -> Binding:
    return Binding(
        id=binding_id,
        scope=EDITOR_SCOPE,
        stroke=KeyStroke.parse(key),
        action_id=action_id,
        description=description,
        source="defaults",
        **extra,  # type: ignore[arg-type]
    )


# Rolling needs a selected field; without one the key falls through to the host.
ROLL_WHEN = (WhenClause("has_selection"),)

DEFAULT_BINDINGS: tuple[Binding, ...] = (
    _bind("roll.up.arrow", "ArrowUp", "roll.up", "Roll up", when=ROLL_WHEN),
    _bind("roll.up.plus", "+", "roll.up", "Roll up", when=ROLL_WHEN),
    _bind("roll.up.equals", "=", "roll.up", "Roll up", when=ROLL_WHEN),
    _bind("roll.up.letter", "a", "roll.up", "Roll up", when=ROLL_WHEN),
    _bind("roll.down.arrow", "ArrowDown", "roll.down", "Roll down", when=ROLL_WHEN),
    _bind("roll.down.minus", "-", "roll.down", "Roll down", when=ROLL_WHEN),
    _bind("roll.down.letter", "z", "roll.down", "Roll down", when=ROLL_WHEN),
    _bind("cursor.left.arrow", "ArrowLeft", "cursor.left", "Select field to the left"),
    _bind("cursor.right.arrow", "ArrowRight", "cursor.right", "Select field to the right"),
    _bind("cursor.backward.backspace", "Backspace", "cursor.backward", "Previous field"),
    _bind("cursor.forward.space", " ", "cursor.forward", "Next field"),
    _bind("clipboard.copy.ctrl", "ctrl+c", "clipboard.copy", "Copy value"),
    _bind("clipboard.copy.meta", "meta+c", "clipboard.copy", "Copy value"),
    _bind("clipboard.cut.ctrl", "ctrl+x", "clipboard.copy", "Copy value"),
    _bind("clipboard.cut.meta", "meta+x", "clipboard.copy", "Copy value"),
    _bind("clipboard.paste.ctrl", "ctrl+v", "clipboard.paste", "Paste value"),
    _bind("clipboard.paste.meta", "meta+v", "clipboard.paste", "Paste value"),
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    include_actions: Sequence[str] | None = None,
    exclude_actions: Sequence[str] | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_scope_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings."""

    allowed_actions = _build_filters(include_actions, exclude_actions)
    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    for action in DEFAULT_ACTIONS:
        if not _selected(action.id, allowed_actions):
            continue
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        if not _selected(binding.action_id, allowed_actions):
            continue
        registry.register_binding(binding, replace=replace)

    if extra_bindings:
        for binding in extra_bindings:
            registry.register_binding(binding, replace=replace)

    if per_scope_overrides:
        for scope, bindings in per_scope_overrides.items():
            for binding in bindings:
                if binding.scope != scope:
                    raise ValueError(
                        f"Override binding '{binding.id}' must target scope '{scope}'"
                    )
                registry.register_binding(binding, replace=True)


__all__ = ["load_default_keymaps", "DEFAULT_ACTIONS", "DEFAULT_BINDINGS", "EDITOR_SCOPE"]


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True
