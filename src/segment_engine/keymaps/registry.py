"""Keymap registry responsible for storing actions and bindings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

from segment_engine.errors import KeymapConflictError
from segment_engine.runtime.telemetry import span

from .models import ActionRef, Binding, KeyStroke


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    action_count: int
    binding_count: int
    scopes: tuple[str, ...]


class KeymapRegistry:
    """Owns action references and binding metadata."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._scope_index: Dict[str, Dict[str, set[str]]] = {}
        self._logger_name = logger_name

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"action_id": action.id},
        ):
            if not replace and action.id in self._actions:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "scope": binding.scope},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )

            conflicts = self.detect_conflicts(binding)
            if conflicts and not replace:
                handle.add_metadata(
                    "conflicts", ",".join(conflict.id for conflict in conflicts)
                )
                raise KeymapConflictError(binding, conflicts)

            if replace:
                for conflict in conflicts:
                    self._remove_binding(conflict)
                    self._bindings.pop(conflict.id, None)
                existing = self._bindings.get(binding.id)
                if existing:
                    self._remove_binding(existing)
                    self._bindings.pop(existing.id, None)
            elif binding.id in self._bindings:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            self._bindings[binding.id] = binding
            self._index_binding(binding)
            return binding

    def lookup(
        self,
        stroke: KeyStroke,
        *,
        scopes: Sequence[str] = ("editor",),
        context: Optional[Mapping[str, bool]] = None,
    ) -> Optional[Binding]:
        """Best binding for ``stroke``; earlier scopes win priority ties."""

        flags = context or {}
        best: Optional[Binding] = None
        for scope in scopes:
            for binding_id in self._scope_index.get(scope, {}).get(stroke.token, ()):
                binding = self._bindings[binding_id]
                if not binding.allows(flags):
                    continue
                if best is None or binding.priority > best.priority:
                    best = binding
        return best

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self._actions),
            binding_count=len(self._bindings),
            scopes=tuple(sorted(self._scope_index)),
        )

    def detect_conflicts(self, binding: Binding) -> list[Binding]:
        """Bindings in the same scope on the same key whose contexts can overlap."""

        conflicts: list[Binding] = []
        for match_id in self._scope_index.get(binding.scope, {}).get(
            binding.key_signature, set()
        ):
            existing = self._bindings[match_id]
            if _contexts_overlap(binding, existing):
                conflicts.append(existing)
        return conflicts

    def _index_binding(self, binding: Binding) -> None:
        by_signature = self._scope_index.setdefault(binding.scope, {})
        bucket = by_signature.setdefault(binding.key_signature, set())
        bucket.add(binding.id)

    def _remove_binding(self, binding: Binding) -> None:
        scope_bucket = self._scope_index.get(binding.scope)
        if not scope_bucket:
            return
        signatures = scope_bucket.get(binding.key_signature)
        if not signatures:
            return
        signatures.discard(binding.id)
        if not signatures:
            scope_bucket.pop(binding.key_signature, None)
        if not scope_bucket:
            self._scope_index.pop(binding.scope, None)


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    left_map = left.when_map
    right_map = right.when_map

    if not left.when and not right.when:
        return True

    for flag, expected in left_map.items():
        if flag in right_map and right_map[flag] != expected:
            return False

    if not left.when or not right.when:
        return False

    return left_map == right_map


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
]
