from typing import List

import pytest

from segment_engine.engine.feedback import FeedbackState
from segment_engine.runtime.timers import FLASH, REPEAT, SWIPE, TimerSlots


def make_feedback(clock) -> tuple[FeedbackState, TimerSlots, List[str]]:
    timers = TimerSlots(clock)
    seen: List[str] = []
    return FeedbackState(timers, on_change=seen.append), timers, seen


def test_flash_falls_back_to_normal_after_duration(clock) -> None:
    feedback, timers, seen = make_feedback(clock)

    feedback.confirm()
    clock.advance(200)
    assert timers.process() == []
    assert feedback.state == "confirm"

    clock.advance(100)
    assert timers.process() == [FLASH]
    assert feedback.state == "normal"
    assert seen == ["confirm", "normal"]


def test_lower_priority_flash_is_dropped_while_higher_shows(clock) -> None:
    feedback, _timers, _seen = make_feedback(clock)

    assert feedback.error()
    assert not feedback.warning()
    assert not feedback.confirm()
    assert feedback.state == "error"
    assert feedback.error()


def test_long_warning_lasts_two_seconds(clock) -> None:
    feedback, timers, _seen = make_feedback(clock)

    feedback.warning(long=True)
    clock.advance(1900)
    timers.process()
    assert feedback.state == "warning"
    clock.advance(200)
    timers.process()
    assert feedback.state == "normal"


def test_display_reflects_access_and_theme(clock) -> None:
    feedback, _timers, _seen = make_feedback(clock)

    feedback.error()
    feedback.dark = True
    assert feedback.display == "dark-error"
    feedback.view_only = True
    assert feedback.display == "dark-view-only"
    feedback.disabled = True
    assert feedback.display == "dark-disabled"


def test_unknown_feedback_state_raises(clock) -> None:
    feedback, _timers, _seen = make_feedback(clock)
    with pytest.raises(ValueError):
        feedback.flash("panic")


def test_interval_timer_fires_after_delay_then_at_rate(clock) -> None:
    timers = TimerSlots(clock)
    ticks: List[float] = []
    timers.start(REPEAT, 500, lambda: ticks.append(clock.now), interval_ms=100)

    for _ in range(8):
        clock.advance(100)
        timers.process()

    assert ticks == pytest.approx([0.5, 0.6, 0.7, 0.8])


def test_starting_a_timer_replaces_the_pending_one(clock) -> None:
    timers = TimerSlots(clock)
    fired: List[str] = []
    timers.start(SWIPE, 100, lambda: fired.append("first"))
    timers.start(SWIPE, 300, lambda: fired.append("second"))

    clock.advance(200)
    timers.process()
    assert fired == []
    clock.advance(100)
    timers.process()
    assert fired == ["second"]
    assert not timers.active(SWIPE)


def test_cancel_is_idempotent(clock) -> None:
    timers = TimerSlots(clock)
    timers.cancel(FLASH)
    timers.start(FLASH, 10, lambda: None)
    timers.cancel(FLASH)
    timers.cancel(FLASH)

    clock.advance(50)
    assert timers.process() == []


def test_unknown_timer_category_raises(clock) -> None:
    with pytest.raises(KeyError):
        TimerSlots(clock).start("blink", 10, lambda: None)


def test_timer_replaced_by_earlier_callback_in_same_pass_is_not_fired(clock) -> None:
    timers = TimerSlots(clock)
    fired: List[str] = []

    def roll() -> None:
        fired.append("repeat")
        timers.start(FLASH, 250, lambda: fired.append("new flash"))

    timers.start(REPEAT, 100, roll)
    timers.start(FLASH, 50, lambda: fired.append("old flash"))

    clock.advance(200)
    assert timers.process() == [REPEAT]

    assert fired == ["repeat"]
    assert timers.active(FLASH)
    clock.advance(300)
    timers.process()
    assert fired == ["repeat", "new flash"]


def test_timer_cancelled_by_earlier_callback_in_same_pass_is_not_fired(clock) -> None:
    timers = TimerSlots(clock)
    fired: List[str] = []
    timers.start(REPEAT, 100, lambda: timers.cancel(SWIPE))
    timers.start(SWIPE, 100, lambda: fired.append("swipe"))

    clock.advance(100)
    assert timers.process() == [REPEAT]
    assert fired == []
