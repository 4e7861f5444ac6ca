import pytest

from segment_engine.domains import AngleEditorOptions, AngleStyle, TimeEditorOptions
from segment_engine.domains.time import DateTimeStyle, HourStyle
from segment_engine.errors import OptionsError


def test_preset_sets_iso_layout() -> None:
    options = TimeEditorOptions.resolve("iso")

    assert options.date_time_separator == "T"
    assert options.show_seconds
    assert options.hour_style is HourStyle.HOURS_24


def test_later_layers_override_earlier_ones() -> None:
    options = TimeEditorOptions.resolve(["iso", {"show_seconds": False}, "date_only"])

    assert not options.show_seconds
    assert options.date_time_separator == "T"
    assert options.date_time_style is DateTimeStyle.DATE_ONLY


def test_enum_options_accept_names_and_values() -> None:
    assert TimeEditorOptions.resolve({"hour_style": "AM_PM"}).hour_style is HourStyle.AM_PM
    assert TimeEditorOptions.resolve({"hour_style": "am_pm"}).hour_style is HourStyle.AM_PM
    assert AngleEditorOptions.resolve({"angle_style": "dd_mm"}).angle_style is AngleStyle.DD_MM


def test_instance_passes_through_unchanged() -> None:
    options = TimeEditorOptions(show_seconds=True)
    assert TimeEditorOptions.resolve(options) is options
    assert TimeEditorOptions.resolve([options, {"rtl": True}]).show_seconds


def test_list_values_become_tuples() -> None:
    options = TimeEditorOptions.resolve({"am_pm_strings": ["am", "pm"]})
    assert options.am_pm_strings == ("am", "pm")


@pytest.mark.parametrize(
    "options",
    ["rfc2822", {"colour": "red"}, {"hour_style": "hours_12"}, 42],
)
def test_bad_time_options_raise(options: object) -> None:
    with pytest.raises(OptionsError):
        TimeEditorOptions.resolve(options)
