from typing import List

import pytest

from segment_engine.bounds import GregorianCalendar, WallTime
from segment_engine.engine import SegmentEditor
from segment_engine.actions import InputResult
from segment_engine.input import InputAction, InputRouter
from segment_engine.keymaps import ActionRef, Binding, KeymapRegistry, load_default_keymaps
from segment_engine.runtime import REPEAT

CAL = GregorianCalendar()


def millis(*parts: int) -> int:
    return CAL.to_millis(WallTime(*parts))


def make_router(clock, **editor_kwargs) -> InputRouter:
    editor = SegmentEditor.time("iso", value=millis(2024, 1, 1), clock=clock, **editor_kwargs)
    return InputRouter(editor)


def test_held_arrow_repeats_after_delay_then_at_rate(clock) -> None:
    router = make_router(clock)
    editor = router.editor

    result = router.press("ArrowUp")
    assert result.action is InputAction.ROLL_UP
    assert result.status == "applied"
    assert editor.value == millis(2024, 1, 1, 0, 0, 1)

    clock.advance(400)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1, 0, 0, 1)
    clock.advance(100)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1, 0, 0, 2)
    clock.advance(100)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1, 0, 0, 3)

    router.release("ArrowUp")
    clock.advance(500)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1, 0, 0, 3)


def test_os_autorepeat_of_held_key_is_ignored(clock) -> None:
    router = make_router(clock)

    router.press("ArrowDown")
    again = router.press("ArrowDown")

    assert again.status == "held"
    assert router.editor.value == millis(2023, 12, 31, 23, 59, 59)


def test_different_key_cancels_pending_repeat(clock) -> None:
    router = make_router(clock)
    editor = router.editor

    router.press("ArrowUp")
    router.press("c", ("ctrl",))

    assert not editor.timers.active(REPEAT)
    clock.advance(600)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1, 0, 0, 1)


def test_digit_key_types_into_selected_field(clock) -> None:
    router = make_router(clock)

    result = router.press("7")

    assert result.action is InputAction.DIGIT_ENTRY
    assert router.editor.copy_text() == "2024-01-01T00:00:07"


def test_copy_sends_text_to_clipboard_sink(clock) -> None:
    copied: List[str] = []
    editor = SegmentEditor.angle({"angle_style": "DD"}, value=12, clock=clock)
    router = InputRouter(editor, clipboard_sink=copied.append)

    result = router.press("c", ("meta",))

    assert result.text == "+12°"
    assert copied == ["+12°"]
    assert not editor.timers.active(REPEAT)


def test_paste_without_clipboard_source_prompts_host(clock) -> None:
    router = make_router(clock)
    prompts: List[object] = []
    router.editor.bus.subscribe("paste.prompt", prompts.append)

    assert router.press("ctrl+v").status == "prompt"
    assert prompts == [True]


def test_paste_reads_clipboard_source(clock) -> None:
    editor = SegmentEditor.time("iso", clock=clock)
    router = InputRouter(editor, clipboard_source=lambda: "1999-12-31T23:59:59")

    assert router.press("v", ("ctrl",)).status == "pasted"
    assert editor.value == millis(1999, 12, 31, 23, 59, 59)


def test_view_only_editor_allows_copy_only(clock) -> None:
    router = make_router(clock, view_only=True)

    blocked = router.press("ArrowUp")
    copied = router.press("ctrl+c")

    assert not blocked.consumed
    assert blocked.status == "ignored"
    assert copied.status == "copied"
    assert router.editor.value == millis(2024, 1, 1)


def test_disabled_editor_ignores_everything(clock) -> None:
    router = make_router(clock, disabled=True)

    assert router.press("ctrl+c").status == "ignored"
    assert not router.spinner_press(1)


@pytest.mark.parametrize(
    ("key", "modifiers"),
    [("Tab", ()), ("Shift", ()), ("F5", ()), ("x", ("alt",)), ("Escape", ())],
)
def test_non_editing_keys_classify_as_none(clock, key: str, modifiers: tuple) -> None:
    router = make_router(clock)
    assert router.classify(key, modifiers) is InputAction.NONE


def test_token_keys_on_token_fields_win_over_bindings(clock) -> None:
    editor = SegmentEditor.time({"hour_style": "am_pm"}, value=millis(2024, 1, 1), clock=clock)
    router = InputRouter(editor)

    assert router.classify("a") is InputAction.ROLL_UP
    editor.select(editor.sequence.find("meridiem").index)
    assert router.classify("a") is InputAction.DIGIT_ENTRY
    assert router.classify("ArrowUp") is InputAction.ROLL_UP


def test_minus_on_sign_field_is_entry_not_roll(clock) -> None:
    editor = SegmentEditor.angle({"angle_style": "DD"}, value=12, clock=clock)
    router = InputRouter(editor)

    assert router.classify("-") is InputAction.ROLL_DOWN
    editor.select(0)
    assert router.classify("-") is InputAction.DIGIT_ENTRY
    router.press("-")
    assert editor.value == -12.0


def test_spinner_rolls_once_on_quick_release(clock) -> None:
    router = make_router(clock)
    editor = router.editor

    assert router.spinner_press(1)
    assert editor.value == millis(2024, 1, 1)
    router.spinner_release()
    assert editor.value == millis(2024, 1, 1, 0, 0, 1)

    router.spinner_press(-1)
    clock.advance(500)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1)
    router.spinner_leave()
    clock.advance(500)
    editor.process_timers()
    assert editor.value == millis(2024, 1, 1)
    assert router.spinner_release().status.value == "ignored"


def test_gesture_methods_drive_swipe(clock) -> None:
    router = make_router(clock)

    assert router.gesture_begin(18, 40)
    clock.advance(300)
    router.gesture_move(-30)
    outcome = router.gesture_end()

    assert outcome.changed
    assert router.editor.value == millis(2023, 12, 31, 23, 59, 59)


def test_press_calls_the_registered_action_handler(clock) -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    strokes: List[str] = []

    def counting_roll(context, stroke) -> InputResult:
        strokes.append(stroke.token)
        return InputResult(InputAction.ROLL_UP, status="counted")

    registry.register_action(
        ActionRef(id=InputAction.ROLL_UP.value, handler=counting_roll), replace=True
    )
    router = InputRouter(
        SegmentEditor.time("iso", value=millis(2024, 1, 1), clock=clock), registry=registry
    )

    result = router.press("ArrowUp")

    assert result.status == "counted"
    assert strokes == ["ArrowUp"]
    assert router.editor.value == millis(2024, 1, 1)


def test_scoped_binding_applies_only_to_its_editor_kind(clock) -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)

    def jump_to_2030(context, stroke) -> InputResult:
        context.editor.value = millis(2030, 1, 1)
        return InputResult(InputAction.CUSTOM, status="jumped")

    registry.register_action(
        ActionRef(id="time.jump", handler=jump_to_2030, metadata={"repeat": False})
    )
    registry.register_binding(
        Binding(id="time.jump.j", scope="time", stroke="j", action_id="time.jump")
    )
    time_router = InputRouter(SegmentEditor.time("iso", clock=clock), registry=registry)
    angle_router = InputRouter(SegmentEditor.angle(clock=clock), registry=registry)

    assert time_router.classify("j") is InputAction.CUSTOM
    assert time_router.press("j").status == "jumped"
    assert time_router.editor.value == millis(2030, 1, 1)
    assert not time_router.editor.timers.active(REPEAT)
    assert angle_router.classify("j") is InputAction.DIGIT_ENTRY


def test_missing_digit_entry_action_leaves_plain_keys_unhandled(clock) -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry, exclude_actions=(InputAction.DIGIT_ENTRY.value,))
    router = InputRouter(
        SegmentEditor.time("iso", value=millis(2024, 1, 1), clock=clock), registry=registry
    )

    assert router.classify("7") is InputAction.NONE
    assert not router.press("7").consumed
    assert router.classify("ArrowUp") is InputAction.ROLL_UP


def test_roll_keys_fall_through_without_a_selection(clock) -> None:
    router = make_router(clock)
    editor = router.editor
    editor.move_cursor(1)
    assert editor.sequence.selected is None

    assert router.classify("ArrowUp") is InputAction.NONE
    assert not router.press("ArrowUp").consumed
    assert router.classify("ArrowLeft") is InputAction.MOVE_LEFT
    assert editor.value == millis(2024, 1, 1)
