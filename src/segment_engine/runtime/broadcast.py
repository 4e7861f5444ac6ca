"""Cross-editor broadcast: theme changes and two exclusivity singletons."""

from __future__ import annotations

import weakref
from typing import Any, Optional, Protocol

from segment_engine.runtime import telemetry

PASTE_PROMPT = "paste_prompt"
HEADER_DRAG = "header_drag"


class BroadcastMember(Protocol):
    """What the broadcast needs from a registered editor."""

    def apply_theme(self, dark: bool) -> None: ...

    def release_singleton(self, name: str) -> None: ...


class EditorBroadcast:
    """Non-owning registry of live editors.

    Editors register on construction and unregister on disposal. The only
    shared state is the theme flag and the holder of each singleton;
    acquiring a singleton releases its previous holder.
    """

    def __init__(self) -> None:
        self._members: "weakref.WeakSet[Any]" = weakref.WeakSet()
        self._holders: dict[str, "weakref.ReferenceType[Any]"] = {}
        self.dark = False

    def __len__(self) -> int:
        return len(self._members)

    def register(self, editor: BroadcastMember) -> None:
        self._members.add(editor)
        editor.apply_theme(self.dark)

    def unregister(self, editor: BroadcastMember) -> None:
        self._members.discard(editor)
        for name in (PASTE_PROMPT, HEADER_DRAG):
            if self.holder(name) is editor:
                self._holders.pop(name, None)

    def set_theme(self, dark: bool) -> None:
        if self.dark == dark:
            return
        self.dark = dark
        telemetry.record_event(
            "broadcast.theme", data={"dark": dark, "editors": len(self._members)}
        )
        for editor in list(self._members):
            editor.apply_theme(dark)

    def holder(self, name: str) -> Optional[Any]:
        ref = self._holders.get(name)
        return ref() if ref is not None else None

    def acquire(self, name: str, editor: BroadcastMember) -> None:
        if name not in (PASTE_PROMPT, HEADER_DRAG):
            raise KeyError(f"Unknown singleton '{name}'")
        previous = self.holder(name)
        if previous is editor:
            return
        self._holders[name] = weakref.ref(editor)
        if previous is not None:
            previous.release_singleton(name)

    def release(self, name: str, editor: BroadcastMember) -> None:
        if self.holder(name) is editor:
            self._holders.pop(name, None)


__all__ = ["EditorBroadcast", "BroadcastMember", "PASTE_PROMPT", "HEADER_DRAG"]
