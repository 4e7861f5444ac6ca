from segment_engine.bounds import CalendarField, GregorianCalendar, WallTime
from segment_engine.bounds.calendar import MILLIS_PER_DAY, days_from_civil

CAL = GregorianCalendar()


def test_leap_years_and_month_lengths() -> None:
    assert CAL.is_leap_year(2024)
    assert CAL.is_leap_year(2000)
    assert not CAL.is_leap_year(1900)
    assert CAL.is_leap_year(0)
    assert CAL.days_in_month(2023, 2) == 28
    assert CAL.days_in_month(2024, 2) == 29
    assert CAL.days_in_month(2024, 4) == 30


def test_epoch_anchor() -> None:
    assert days_from_civil(1970, 1, 1) == 0
    assert CAL.to_millis(WallTime(1970, 1, 2)) == MILLIS_PER_DAY
    assert CAL.from_millis(-1) == WallTime(1969, 12, 31, 23, 59, 59, 999)


def test_wall_time_survives_conversion_for_distant_years() -> None:
    for wall in (
        WallTime(2024, 2, 29, 14, 59, 59, 120),
        WallTime(-44, 3, 15, 12),
        WallTime(9999, 12, 31, 23, 59, 59, 999),
        WallTime(0, 1, 1),
    ):
        assert CAL.from_millis(CAL.to_millis(wall)) == wall


def test_month_arithmetic_pins_day_to_month_end() -> None:
    start = CAL.to_millis(WallTime(2024, 1, 31, 8))

    assert CAL.from_millis(CAL.add(start, CalendarField.MONTH, 1)) == WallTime(2024, 2, 29, 8)
    assert CAL.from_millis(CAL.add(start, CalendarField.MONTH, -2)) == WallTime(2023, 11, 30, 8)
    assert CAL.from_millis(CAL.add(start, CalendarField.YEAR, 1)) == WallTime(2025, 1, 31, 8)


def test_fixed_units_carry_across_days() -> None:
    start = CAL.to_millis(WallTime(2023, 12, 31, 23, 59, 59))

    assert CAL.from_millis(CAL.add(start, CalendarField.SECOND, 1)) == WallTime(2024, 1, 1)
    assert CAL.is_valid_date(WallTime(2024, 2, 29))
    assert not CAL.is_valid_date(WallTime(2023, 2, 29))
    assert CAL.missing_date_range(1582, 10) is None
