"""Ordered fields, their value maps, selection and display order."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .models import NO_SELECTION, Field, FieldKind, FieldStep, FieldValue

COMMITTED = "committed"
PREVIEW_UP = "up"
PREVIEW_DOWN = "down"

_TARGETS = (COMMITTED, PREVIEW_UP, PREVIEW_DOWN)


class FieldSequence:
    """Fields of one editor plus three parallel value maps.

    ``committed`` holds what the editor shows; ``up`` and ``down`` hold swipe
    previews. The maps are keyed by field index and never share slots. A
    preview slot holding ``None`` means the roll has no legal result.
    """

    def __init__(self, *, rtl: bool = False) -> None:
        self.rtl = rtl
        self._fields: List[Field] = []
        self._groups: Dict[str, Tuple[int, int]] = {}
        self._maps: Dict[str, Dict[int, FieldValue]] = {t: {} for t in _TARGETS}
        self.display_order: List[Field] = []
        self.selection = NO_SELECTION

    @classmethod
    def from_steps(
        cls,
        steps: Iterable[FieldStep],
        *,
        rtl: bool = False,
        preferred: Sequence[str] = (),
    ) -> "FieldSequence":
        sequence = cls(rtl=rtl)
        sequence.build(steps, preferred=preferred)
        return sequence

    def build(self, steps: Iterable[FieldStep], *, preferred: Sequence[str] = ()) -> None:
        """Lay out ``steps`` from scratch and pick the initial selection."""

        self._fields = []
        self._groups = {}
        for target in _TARGETS:
            self._maps[target] = {}

        for step in steps:
            if step.kind is FieldKind.DIGIT:
                if step.role in self._groups:
                    raise ValueError(f"Digit group '{step.role}' laid out twice")
                self._groups[step.role] = (len(self._fields), step.width)
                for offset in range(step.width):
                    self._append(step, offset=offset, width=step.width)
                    self._maps[COMMITTED][len(self._fields) - 1] = 0
            else:
                self._append(step)
                initial: FieldValue = step.tokens[0] if step.tokens else step.text
                self._maps[COMMITTED][len(self._fields) - 1] = initial

        self.selection = self._initial_selection(preferred)
        self.compute_display_order()

    def _append(self, step: FieldStep, *, offset: int = 0, width: int = 1) -> None:
        self._fields.append(
            Field(
                kind=step.kind,
                index=len(self._fields),
                role=step.role,
                offset=offset,
                width=width,
                text=step.text,
                tokens=step.tokens,
                bidi=step.bidi,
                hidden=step.hidden,
            )
        )

    def _initial_selection(self, preferred: Sequence[str]) -> int:
        for role in preferred:
            group = self._groups.get(role)
            if group is not None:
                start, width = group
                if not self._fields[start + width - 1].hidden:
                    return start + width - 1
        for field in self._fields:
            if field.selectable:
                return field.index
        return NO_SELECTION

    # Field access

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    @property
    def fields(self) -> Tuple[Field, ...]:
        return tuple(self._fields)

    def field(self, index: int) -> Field:
        return self._fields[index]

    def find(self, role: str) -> Optional[Field]:
        for field in self._fields:
            if field.role == role:
                return field
        return None

    def group(self, role: str) -> Optional[Tuple[int, int]]:
        return self._groups.get(role)

    def has(self, role: str) -> bool:
        return role in self._groups or self.find(role) is not None

    @property
    def selected(self) -> Optional[Field]:
        if self.selection == NO_SELECTION:
            return None
        return self._fields[self.selection]

    # Value maps

    def values(self, target: str = COMMITTED) -> Dict[int, FieldValue]:
        return self._maps[target]

    def snapshot(self, target: str = COMMITTED) -> Dict[int, FieldValue]:
        return dict(self._maps[target])

    def value_of(self, index: int, target: str = COMMITTED) -> FieldValue:
        return self._maps[target].get(index)

    def set_value(self, index: int, value: FieldValue, target: str = COMMITTED) -> None:
        self._maps[target][index] = value

    def clear_previews(self) -> None:
        self._maps[PREVIEW_UP].clear()
        self._maps[PREVIEW_DOWN].clear()

    def get_digits(
        self,
        role: str,
        default: int = 0,
        values: Optional[Mapping[int, FieldValue]] = None,
    ) -> int:
        group = self._groups.get(role)
        if group is None:
            return default
        source = self._maps[COMMITTED] if values is None else values
        start, width = group
        number = 0
        for index in range(start, start + width):
            number = number * 10 + int(source.get(index) or 0)
        return number

    def set_digits(
        self,
        role: str,
        number: int,
        target: str = COMMITTED,
        *,
        into: Optional[Dict[int, FieldValue]] = None,
    ) -> None:
        group = self._groups.get(role)
        if group is None:
            return
        sink = self._maps[target] if into is None else into
        start, width = group
        number = abs(int(number))
        for index in range(start + width - 1, start - 1, -1):
            number, digit = divmod(number, 10)
            sink[index] = digit

    def text_of(self, index: int, target: str = COMMITTED) -> str:
        value = self._maps[target].get(index)
        if value is None:
            return ""
        return str(value)

    def render(self, target: str = COMMITTED) -> str:
        """Concatenate visible field text in logical order."""

        return "".join(
            self.text_of(field.index, target) for field in self._fields if not field.hidden
        )

    # Cursor

    def select(self, index: int) -> bool:
        if not 0 <= index < len(self._fields):
            return False
        if not self._fields[index].selectable:
            return False
        self.selection = index
        return True

    def move_cursor(self, direction: int, *, logical: bool = False) -> int:
        """Select the next selectable field; ``NO_SELECTION`` when none is left."""

        if logical:
            order: Sequence[Field] = self._fields
        else:
            order = self.display_order
            if self.rtl:
                direction = -direction

        position = next(
            (i for i, field in enumerate(order) if field.index == self.selection), None
        )
        if direction > 0:
            candidates = range(0 if position is None else position + 1, len(order))
        else:
            candidates = range(len(order) - 1 if position is None else position - 1, -1, -1)

        for i in candidates:
            if order[i].selectable:
                self.selection = order[i].index
                return self.selection

        self.selection = NO_SELECTION
        return self.selection

    def compute_display_order(self) -> List[Field]:
        """Reorder fields for rendering without changing their indexes.

        Right-to-left layouts keep separators in place but reverse each run of
        digits and signs, with bidi separators riding along inside a run.
        """

        if not self.rtl:
            self.display_order = [field for field in self._fields if not field.hidden]
            return self.display_order

        ordered: List[Field] = []
        deferred: List[Field] = []
        in_run = False
        for field in self._fields:
            if field.hidden:
                continue
            if field.flippable or (in_run and field.bidi):
                in_run = True
                deferred.append(field)
            else:
                in_run = False
                ordered.extend(reversed(deferred))
                deferred.clear()
                ordered.append(field)
        ordered.extend(reversed(deferred))
        self.display_order = ordered
        return ordered


__all__ = [
    "COMMITTED",
    "PREVIEW_DOWN",
    "PREVIEW_UP",
    "FieldSequence",
]
