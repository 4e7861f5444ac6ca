"""Merging option presets, mappings and instances into frozen option records."""

from __future__ import annotations

import enum
from dataclasses import MISSING, fields
from typing import Any, Dict, Mapping, Type, TypeVar

from segment_engine.errors import OptionsError

T = TypeVar("T")


def _coerce_enum(option: str, enum_type: Type[enum.Enum], value: Any) -> enum.Enum:
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        for member in enum_type:
            if lowered in (member.name.lower(), str(member.value).lower()):
                return member
    raise OptionsError(option, value, f"expected one of {[m.name for m in enum_type]}")


def _layer(cls: Type[T], item: Any, presets: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    if item is None:
        return {}
    if isinstance(item, str):
        preset = presets.get(item.strip().lower())
        if preset is None:
            raise OptionsError("preset", item, f"known presets are {sorted(presets)}")
        return dict(preset)
    if isinstance(item, cls):
        return {f.name: getattr(item, f.name) for f in fields(cls)}  # type: ignore[arg-type]
    if isinstance(item, Mapping):
        return dict(item)
    raise OptionsError("options", item, "expected a preset name, mapping or options record")


def resolve_options(
    cls: Type[T],
    options: Any,
    presets: Mapping[str, Mapping[str, Any]],
) -> T:
    """Merge ``options`` left to right into an instance of ``cls``.

    ``options`` may be ``None``, a preset name, a mapping, an instance of
    ``cls`` or a list/tuple of those. Enum-valued options also accept their
    member name or value as text.
    """

    if isinstance(options, cls):
        return options

    items = list(options) if isinstance(options, (list, tuple)) else [options]
    merged: Dict[str, Any] = {}
    for item in items:
        merged.update(_layer(cls, item, presets))

    known = {f.name: f for f in fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(merged) - set(known))
    if unknown:
        raise OptionsError(unknown[0], merged[unknown[0]], "unknown option")

    for name, value in list(merged.items()):
        default = known[name].default
        if default is MISSING:
            continue
        if isinstance(default, enum.Enum):
            merged[name] = _coerce_enum(name, type(default), value)
        elif isinstance(default, tuple) and isinstance(value, list):
            merged[name] = tuple(value)

    return cls(**merged)


__all__ = ["resolve_options"]
