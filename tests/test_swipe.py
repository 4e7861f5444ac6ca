from segment_engine.bounds import GregorianCalendar, WallTime
from segment_engine.engine import RollStatus, SegmentEditor
from segment_engine.fields.sequence import PREVIEW_DOWN, PREVIEW_UP

CAL = GregorianCalendar()
SECONDS_ONES = 18


def make_time_editor(clock) -> SegmentEditor:
    value = CAL.to_millis(WallTime(2024, 2, 29, 14, 59, 59))
    return SegmentEditor.time("iso", value=value, clock=clock)


def test_begin_primes_previews_for_changed_fields_only(clock) -> None:
    editor = make_time_editor(clock)

    assert editor.swipe.begin(SECONDS_ONES, 40)

    up = editor.sequence.values(PREVIEW_UP)
    down = editor.sequence.values(PREVIEW_DOWN)
    assert up[SECONDS_ONES] == 0
    assert down[SECONDS_ONES] == 8
    assert up[12] == 5
    assert 0 not in up and 0 not in down
    assert editor.sequence.selection == SECONDS_ONES


def test_offset_stays_zero_until_minimum_swipe_time(clock) -> None:
    editor = make_time_editor(clock)
    editor.swipe.begin(SECONDS_ONES, 40)

    clock.advance(100)
    assert editor.swipe.move(30) == 0.0
    clock.advance(200)
    assert editor.swipe.move(30) == 30.0
    clock.advance(100)
    assert editor.swipe.move(80) == 36.0


def test_resolve_past_threshold_commits_and_clears_previews(clock) -> None:
    editor = make_time_editor(clock)
    editor.swipe.begin(SECONDS_ONES, 40)
    clock.advance(300)
    editor.swipe.move(30)

    outcome = editor.swipe.resolve()

    assert outcome.status is RollStatus.APPLIED
    assert editor.copy_text() == "2024-02-29T15:00:00"
    assert editor.sequence.values(PREVIEW_UP) == {}
    assert editor.sequence.values(PREVIEW_DOWN) == {}
    assert not editor.swipe.active


def test_short_drag_is_a_tap(clock) -> None:
    editor = make_time_editor(clock)
    editor.swipe.begin(SECONDS_ONES, 40)
    clock.advance(300)
    editor.swipe.move(10)

    assert editor.swipe.resolve().status is RollStatus.IGNORED
    assert editor.copy_text() == "2024-02-29T14:59:59"


def test_swipe_into_rejected_preview_flashes_error(clock) -> None:
    editor = SegmentEditor.angle({"angle_style": "DD"}, value=90, clock=clock)
    editor.swipe.begin(2, 40)

    assert editor.sequence.value_of(2, PREVIEW_UP) is None
    assert editor.sequence.value_of(2, PREVIEW_DOWN) == 9

    editor.swipe.move(20)
    assert editor.swipe.resolve().status is RollStatus.REJECTED
    assert editor.feedback.state == "error"
    assert editor.value == 90.0


def test_sampling_timer_reuses_last_delta(clock) -> None:
    editor = make_time_editor(clock)
    previews = []
    editor.bus.subscribe("swipe.preview", previews.append)
    editor.swipe.begin(SECONDS_ONES, 40)
    editor.swipe.move(20)

    clock.advance(250)
    assert "swipe" in editor.process_timers()

    assert editor.swipe.offset == 20.0
    assert previews[-1]["offset"] == 20.0


def test_disabled_editor_refuses_gestures(clock) -> None:
    editor = make_time_editor(clock)
    editor.disabled = True

    assert not editor.swipe.begin(SECONDS_ONES, 40)
    assert not editor.swipe.active
