"""Exception hierarchy for configuration-time failures.

User-input mistakes never raise; they are reported through the feedback
state machine. Everything here signals a programming or configuration defect.
"""

from __future__ import annotations

from typing import Any, Iterable


class SegmentEngineError(RuntimeError):
    """Base class for engine configuration errors."""


class BoundsSpecError(SegmentEngineError, ValueError):
    """Raised when a min/max specification cannot be parsed."""

    def __init__(self, spec: Any, reason: str = "") -> None:
        message = f'Bounds limit "{spec}" not valid'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.spec = spec
        self.reason = reason


class OptionsError(SegmentEngineError, ValueError):
    """Raised for unknown presets or out-of-range option values."""

    def __init__(self, option: str, value: Any, reason: str = "") -> None:
        message = f"Invalid value {value!r} for option '{option}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.option = option
        self.value = value


class KeymapConflictError(SegmentEngineError):
    """Raised when a new binding shadows existing bindings in the same context."""

    def __init__(self, binding: Any, conflicts: Iterable[Any]) -> None:
        conflicts_tuple = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        self.binding = binding
        self.conflicts = conflicts_tuple


__all__ = [
    "SegmentEngineError",
    "BoundsSpecError",
    "OptionsError",
    "KeymapConflictError",
]
