import pytest

from segment_engine.bounds import BoundsLimit, GregorianCalendar, LimitSide, WallTime
from segment_engine.errors import BoundsSpecError, SegmentEngineError

CAL = GregorianCalendar()


def components(*parts: int) -> tuple[int, ...]:
    return WallTime(*parts).components


def millis(*parts: int) -> int:
    return CAL.to_millis(WallTime(*parts))


def make_limit(spec: object, side: LimitSide = LimitSide.LOW) -> BoundsLimit:
    limit = BoundsLimit.parse(spec, side)
    assert limit is not None
    return limit


def test_year_only_limit_matches_whole_year() -> None:
    limit = make_limit("2020")

    assert limit.is_partial
    for parts in ((2020, 1, 1), (2020, 6, 15, 12, 30), (2020, 12, 31, 23, 59, 59, 999)):
        assert limit.compare(millis(*parts), components(*parts)) == 0
    assert limit.compare(millis(2019, 12, 31), components(2019, 12, 31)) == -1
    assert limit.compare(millis(2021, 1, 1), components(2021, 1, 1)) == 1


def test_partial_bounds_around_a_spring_date() -> None:
    low = make_limit("2020", LimitSide.LOW)
    high = make_limit("2020-06", LimitSide.HIGH)
    march = components(2020, 3, 15)

    assert low.compare(millis(2020, 3, 15), march) == 0
    assert not low.violated_by(millis(2020, 3, 15), march)
    assert not high.violated_by(millis(2020, 3, 15), march)
    assert high.compare(millis(2020, 6, 30, 23), components(2020, 6, 30, 23)) == 0
    assert high.compare(millis(2021, 1, 1), components(2021, 1, 1)) > 0
    assert high.violated_by(millis(2021, 1, 1), components(2021, 1, 1))


def test_boundary_fills_unset_components_by_side() -> None:
    low = make_limit("2020-06", LimitSide.LOW)
    high = make_limit("2020-06", LimitSide.HIGH)
    leap_high = make_limit("2024-02", LimitSide.HIGH)

    assert low.boundary() == WallTime(2020, 6, 1, 0, 0, 0, 0)
    assert high.boundary() == WallTime(2020, 6, 30, 23, 59, 59, 999)
    assert leap_high.boundary() == WallTime(2024, 2, 29, 23, 59, 59, 999)


def test_clamp_to_returns_value_inside_and_boundary_outside() -> None:
    high = make_limit("2020-06", LimitSide.HIGH)
    inside = millis(2020, 2, 1)
    outside = millis(2020, 8, 1)

    assert high.clamp_to(inside, components(2020, 2, 1)) == inside
    assert high.clamp_to(outside, components(2020, 8, 1)) == WallTime(2020, 6, 30, 23, 59, 59, 999)


def test_parse_unbounded_and_resolved_forms() -> None:
    assert BoundsLimit.parse(None, LimitSide.LOW) is None
    assert BoundsLimit.parse("  ", LimitSide.HIGH) is None

    as_year = make_limit(1999)
    assert as_year.partial == (1999, None, None, None, None, None, None)

    instant = make_limit(1_600_000_000_000)
    assert instant.resolved == 1_600_000_000_000
    assert instant.year == 2020

    zulu = make_limit("2020-06-01T12:00Z")
    assert not zulu.is_partial
    assert zulu.resolved == millis(2020, 6, 1, 12)

    trailing = make_limit("2020-")
    assert trailing.partial == (2020, None, None, None, None, None, None)


def test_resolved_limit_compares_sign_of_difference() -> None:
    limit = make_limit(1_600_000_000_000, LimitSide.HIGH)

    assert limit.compare(1_600_000_000_001) == 1
    assert limit.compare(1_600_000_000_000) == 0
    assert limit.compare(1_599_999_999_999) == -1


@pytest.mark.parametrize("spec", ["2020-13", "2021-02-29", "2020-01-01T24:00", "soon", True])
def test_malformed_limits_raise(spec: object) -> None:
    with pytest.raises(BoundsSpecError) as excinfo:
        BoundsLimit.parse(spec, LimitSide.LOW)
    assert isinstance(excinfo.value, SegmentEngineError)


def test_numeric_limits_for_angles() -> None:
    limit = BoundsLimit.numeric("-12.5", LimitSide.LOW)
    assert limit is not None
    assert limit.resolved == -12.5
    assert limit.violated_by(-13.0)
    assert not limit.violated_by(-12.5)
    assert BoundsLimit.numeric("", LimitSide.LOW) is None
    with pytest.raises(BoundsSpecError):
        BoundsLimit.numeric("north", LimitSide.HIGH)


def test_boundary_of_partial_limit_without_year_raises() -> None:
    limit = BoundsLimit(LimitSide.HIGH, "--06", partial=(None, 6, None, None, None, None, None))

    with pytest.raises(ValueError, match="no year"):
        limit.boundary()
