import pytest

from segment_engine.domains import AngleEditorOptions, AngleFieldModel, AngleStyle
from segment_engine.engine import RollStatus, SegmentEditor
from segment_engine.errors import OptionsError
from segment_engine.fields import PREVIEW_DOWN, PREVIEW_UP


def make_editor(options: object = None, **kwargs: object) -> SegmentEditor:
    return SegmentEditor.angle(options, **kwargs)


def deg_ones(editor: SegmentEditor) -> int:
    group = editor.sequence.group("deg")
    assert group is not None
    start, width = group
    return start + width - 1


def test_dms_layout_with_compass_points() -> None:
    editor = make_editor({"angle_style": "DD_MM_SS", "compass": True}, value=-45.5)

    assert editor.copy_text() == "S45°30'00\""
    assert editor.value == -45.5
    assert editor.sequence.field(editor.sequence.selection).role == "sec"


def test_longitude_styles_use_east_west() -> None:
    options = AngleEditorOptions.resolve({"angle_style": "ddd", "compass": True})

    assert options.compass_points == ("W", "E")
    assert AngleFieldModel(options).deg_digits == 3


def test_priming_compass_field_previews_other_hemisphere() -> None:
    editor = make_editor({"angle_style": "DD_MM_SS", "compass": True}, value=-45.5)
    sign = editor.sequence.find("sign")
    assert sign is not None

    editor.swipe.prime(sign.index)

    assert editor.sequence.values(PREVIEW_UP)[sign.index] == "N"
    assert editor.sequence.values(PREVIEW_DOWN)[sign.index] == "N"
    assert editor.value == -45.5
    assert editor.copy_text() == "S45°30'00\""
    unchanged = editor.sequence.group("deg")
    assert unchanged is not None
    assert unchanged[0] not in editor.sequence.values(PREVIEW_UP)

    editor.swipe.cancel()
    assert editor.sequence.values(PREVIEW_UP) == {}


def test_wraparound_roll_past_half_turn() -> None:
    editor = make_editor({"angle_style": "DDD", "wrap_around": True}, value=179)
    editor.select(deg_ones(editor))

    outcome = editor.roll(1)

    assert outcome.status is RollStatus.WRAPPED
    assert editor.value == -180.0
    assert editor.feedback.state == "warning"

    editor.roll(-1)
    assert editor.value == 179.0


def test_unsigned_wrap_stays_in_full_turn() -> None:
    editor = make_editor({"angle_style": "DDD", "unsigned": True, "wrap_around": True}, value=359)
    editor.select(deg_ones(editor))

    editor.roll(1)
    assert editor.value == 0.0
    editor.roll(-1)
    assert editor.value == 359.0


def test_without_wrap_the_roll_is_rejected() -> None:
    editor = make_editor({"angle_style": "DDD"}, value=179)
    editor.select(deg_ones(editor))

    assert editor.roll(1).status is RollStatus.REJECTED
    assert editor.value == 179.0
    assert editor.feedback.state == "error"


def test_latitude_never_wraps_and_includes_pole() -> None:
    editor = make_editor({"angle_style": "DD", "wrap_around": True}, value=89)
    editor.select(deg_ones(editor))

    assert editor.roll(1).status is RollStatus.APPLIED
    assert editor.value == 90.0
    assert editor.roll(1).status is RollStatus.REJECTED


def test_minutes_carry_into_degrees() -> None:
    editor = make_editor({"angle_style": "DDD_MM"}, value=10 + 59 / 60)
    minutes = editor.sequence.group("min")
    assert minutes is not None
    editor.select(minutes[0] + 1)

    editor.roll(1)

    assert editor.value == 11.0
    assert editor.copy_text() == "+011°00'"


def test_decimal_precision_places_fraction_before_last_mark() -> None:
    editor = make_editor({"angle_style": "DD", "decimal_precision": 2}, value=-12.25)

    assert editor.copy_text() == "-12.25°"
    frac = editor.sequence.group("frac")
    assert frac is not None
    editor.select(frac[0] + 1)
    editor.roll(1)
    assert editor.value == -12.24


def test_sign_chosen_at_zero_sticks_for_next_digit() -> None:
    editor = make_editor({"angle_style": "DDD"}, value=0)
    sign = editor.sequence.find("sign")
    assert sign is not None

    assert editor.roll(1, index=sign.index).status is RollStatus.FLIPPED
    assert editor.sequence.value_of(sign.index) == "-"
    assert editor.value == 0.0

    editor.select(deg_ones(editor))
    editor.type_key("5")

    assert editor.value == -5.0
    assert editor.copy_text() == "-005°"


def test_typed_sign_key_negates_value() -> None:
    editor = make_editor({"angle_style": "DDD"}, value=25)
    sign = editor.sequence.find("sign")
    assert sign is not None
    editor.select(sign.index)

    editor.type_key("-")

    assert editor.value == -25.0


def test_bounds_clamp_typed_entry() -> None:
    editor = make_editor({"angle_style": "DDD"}, value=5, min=-10, max=20)
    tens = editor.sequence.group("deg")
    assert tens is not None
    editor.select(tens[0] + 1)

    outcome = editor.type_key("9")

    assert outcome.status is RollStatus.CLAMPED
    assert editor.value == 20.0
    assert editor.feedback.state == "warning"


def test_parse_text_reads_decimal_and_dms() -> None:
    model = AngleFieldModel(AngleEditorOptions.resolve({"angle_style": "DD_MM_SS", "compass": True}))

    assert model.parse_text("45°30'0\"S", 0) == round(-45.5 * 3600)
    assert model.parse_text("-12.25", 0) == round(-12.25 * 3600)
    assert model.parse_text("N 10 15", 0) == round((10 + 15 / 60) * 3600)
    assert model.parse_text("10 75", 0) is None
    assert model.parse_text("east-ish", 0) is None


def test_out_of_domain_value_copies_invalid_text() -> None:
    editor = make_editor({"angle_style": "DD"}, value=-100)

    assert editor.out_of_range
    assert editor.copy_text() == "Invalid angle"
    assert editor.validate() == {"min": {"message": "Angle must be at least -90°"}}


@pytest.mark.parametrize(
    "options",
    [
        {"decimal_precision": 7},
        {"compass": ("N", "N")},
        {"compass": True, "unsigned": True},
        {"angle_style": "dms"},
    ],
)
def test_invalid_angle_options_raise(options: dict) -> None:
    with pytest.raises(OptionsError):
        AngleEditorOptions.resolve(options)


def test_style_metadata() -> None:
    assert AngleStyle.DD_MM.is_latitude
    assert not AngleStyle.DDD_MM_SS.is_latitude
    assert AngleStyle.DDD_MM_SS.sub_fields == 2
