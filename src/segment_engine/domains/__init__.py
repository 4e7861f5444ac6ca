"""Field-model strategies: date/time and angle."""

from .base import EntryResult, FieldModel, RollKind, RollUnit, parse_layout
from .options import resolve_options
from .time import (
    DateFieldOrder,
    DateTimeStyle,
    HourStyle,
    MeridiemStyle,
    TimeEditorOptions,
    TimeFieldModel,
    YearStyle,
)
from .angle import AngleEditorOptions, AngleFieldModel, AngleStyle

__all__ = [
    "EntryResult",
    "FieldModel",
    "RollKind",
    "RollUnit",
    "parse_layout",
    "resolve_options",
    "DateFieldOrder",
    "DateTimeStyle",
    "HourStyle",
    "MeridiemStyle",
    "TimeEditorOptions",
    "TimeFieldModel",
    "YearStyle",
    "AngleEditorOptions",
    "AngleFieldModel",
    "AngleStyle",
]
