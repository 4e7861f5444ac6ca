"""Field layout, value maps, cursor and display order."""

from .models import NO_SELECTION, Field, FieldKind, FieldStep, FieldValue
from .sequence import COMMITTED, PREVIEW_DOWN, PREVIEW_UP, FieldSequence

__all__ = [
    "COMMITTED",
    "PREVIEW_DOWN",
    "PREVIEW_UP",
    "NO_SELECTION",
    "Field",
    "FieldKind",
    "FieldSequence",
    "FieldStep",
    "FieldValue",
]
