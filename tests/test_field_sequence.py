import pytest

from segment_engine.fields import (
    COMMITTED,
    NO_SELECTION,
    PREVIEW_DOWN,
    PREVIEW_UP,
    FieldKind,
    FieldSequence,
    FieldStep,
)


def make_steps() -> list[FieldStep]:
    return [
        FieldStep.digits("a", 2),
        FieldStep.separator("-", bidi=True),
        FieldStep.digits("b", 2),
        FieldStep.separator(" "),
        FieldStep.digits("c", 1),
    ]


def make_sequence(*, rtl: bool = False, preferred: tuple[str, ...] = ()) -> FieldSequence:
    return FieldSequence.from_steps(make_steps(), rtl=rtl, preferred=preferred)


def test_digit_groups_expand_into_indexed_fields() -> None:
    sequence = make_sequence()

    assert len(sequence) == 7
    assert [field.kind for field in sequence][:3] == [
        FieldKind.DIGIT,
        FieldKind.DIGIT,
        FieldKind.SEPARATOR,
    ]
    assert sequence.group("b") == (3, 2)
    assert sequence.field(4).is_ones_digit
    assert not sequence.field(3).is_ones_digit
    assert sequence.has("c")
    assert not sequence.has("missing")


def test_initial_selection_prefers_ones_digit_of_first_preferred_group() -> None:
    assert make_sequence(preferred=("z", "b", "a")).selection == 4
    assert make_sequence().selection == 0


def test_digits_round_trip_through_committed_map() -> None:
    sequence = make_sequence()
    sequence.set_digits("a", 42)
    sequence.set_digits("b", 7)
    sequence.set_digits("c", 9)

    assert sequence.get_digits("a") == 42
    assert sequence.get_digits("b") == 7
    assert sequence.render() == "42-07 9"
    assert sequence.value_of(3) == 0


def test_value_maps_are_independent() -> None:
    sequence = make_sequence()
    sequence.set_digits("a", 12)
    sequence.set_digits("a", 13, PREVIEW_UP)

    assert sequence.values(COMMITTED) is not sequence.values(PREVIEW_UP)
    assert sequence.get_digits("a") == 12
    assert sequence.render(PREVIEW_UP).startswith("13")
    assert sequence.values(PREVIEW_DOWN) == {}

    sequence.clear_previews()
    assert sequence.values(PREVIEW_UP) == {}
    assert sequence.get_digits("a") == 12


def test_cursor_skips_separators_and_stops_at_the_ends() -> None:
    sequence = make_sequence()
    assert sequence.select(1)
    assert not sequence.select(2)
    assert not sequence.select(99)

    assert sequence.move_cursor(1) == 3
    assert sequence.move_cursor(1) == 4
    assert sequence.move_cursor(1) == 6
    assert sequence.move_cursor(1) == NO_SELECTION
    assert sequence.move_cursor(-1) == 6


def test_rtl_display_order_reverses_digit_runs() -> None:
    sequence = make_sequence(rtl=True)

    assert [field.index for field in sequence.display_order] == [4, 3, 2, 1, 0, 5, 6]
    assert [field.index for field in make_sequence().display_order] == list(range(7))


def test_rtl_arrow_movement_follows_display_order() -> None:
    sequence = make_sequence(rtl=True)
    sequence.select(1)

    assert sequence.move_cursor(1) == 3
    sequence.select(1)
    assert sequence.move_cursor(-1) == 0
    sequence.select(1)
    assert sequence.move_cursor(1, logical=True) == 3


def test_token_fields_need_two_tokens() -> None:
    with pytest.raises(ValueError):
        FieldStep(FieldKind.SIGN, "sign", tokens=("-",))
    sequence = FieldSequence.from_steps([FieldStep(FieldKind.TOKEN, "era", tokens=("BC", "AD"))])
    field = sequence.field(0)

    assert sequence.value_of(0) == "BC"
    assert field.other_token("BC") == "AD"
    assert field.other_token("AD") == "BC"
