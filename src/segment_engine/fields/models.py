"""Dataclasses describing editable and static fields."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

FieldValue = Union[int, str, None]

NO_SELECTION = -1


class FieldKind(enum.Enum):
    DIGIT = "digit"
    SIGN = "sign"
    TOKEN = "token"
    SEPARATOR = "separator"
    INDICATOR = "indicator"


_EDITABLE = frozenset({FieldKind.DIGIT, FieldKind.SIGN, FieldKind.TOKEN})


@dataclass(frozen=True, slots=True)
class FieldStep:
    """One entry of a layout supplied by a field model.

    A digit step of ``width`` n expands into n digit fields sharing ``role``
    as their group name.
    """

    kind: FieldKind
    role: str
    width: int = 1
    text: str = ""
    tokens: tuple[str, ...] = ()
    bidi: bool = False
    hidden: bool = False

    def __post_init__(self) -> None:
        if not self.role:
            raise ValueError("role cannot be empty")
        if self.width < 1:
            raise ValueError("width must be positive")
        if self.kind in (FieldKind.SIGN, FieldKind.TOKEN) and len(self.tokens) != 2:
            raise ValueError(f"{self.kind.value} field '{self.role}' needs exactly two tokens")

    @classmethod
    def digits(cls, role: str, width: int) -> "FieldStep":
        return cls(FieldKind.DIGIT, role, width=width)

    @classmethod
    def separator(cls, text: str, *, role: str = "sep", bidi: bool = False) -> "FieldStep":
        return cls(FieldKind.SEPARATOR, role, text=text, bidi=bidi)


@dataclass(frozen=True, slots=True)
class Field:
    """A single field; its values live in the owning sequence's maps."""

    kind: FieldKind
    index: int
    role: str
    offset: int = 0
    width: int = 1
    text: str = ""
    tokens: tuple[str, ...] = ()
    bidi: bool = False
    hidden: bool = False

    @property
    def editable(self) -> bool:
        return self.kind in _EDITABLE

    @property
    def selectable(self) -> bool:
        return self.editable and not self.hidden

    @property
    def flippable(self) -> bool:
        return self.kind in (FieldKind.DIGIT, FieldKind.SIGN)

    @property
    def is_ones_digit(self) -> bool:
        return self.kind is FieldKind.DIGIT and self.offset == self.width - 1

    def other_token(self, token: FieldValue) -> Optional[str]:
        if not self.tokens:
            return None
        return self.tokens[1] if token == self.tokens[0] else self.tokens[0]


__all__ = [
    "Field",
    "FieldKind",
    "FieldStep",
    "FieldValue",
    "NO_SELECTION",
]
