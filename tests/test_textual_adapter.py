from __future__ import annotations

from typing import List

import pytest

from segment_engine.adapters.textual import (
    TextualSegmentAdapter,
    TextualUIHooks,
    normalize_textual_key,
)
from segment_engine.bounds import GregorianCalendar, WallTime
from segment_engine.engine import EditorSnapshot, SegmentEditor

START = GregorianCalendar().to_millis(WallTime(2024, 1, 1))


def make_adapter(
    snapshots: List[EditorSnapshot],
    statuses: List[str],
    events: List[tuple[str, object | None]] | None = None,
    copied: List[str] | None = None,
    lines: List[str] | None = None,
) -> TextualSegmentAdapter:
    hooks = TextualUIHooks(
        update_fields=snapshots.append,
        update_status=statuses.append,
        handle_event=lambda name, payload: (events if events is not None else []).append(
            (name, payload)
        ),
        copy_to_clipboard=(copied if copied is not None else []).append,
        log=(lines if lines is not None else []).append,
    )
    return TextualSegmentAdapter(SegmentEditor.time("iso", value=START), hooks)


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("up", None, ("ArrowUp", ())),
        ("ctrl+up", None, ("ArrowUp", ("ctrl",))),
        ("ctrl+c", None, ("c", ("ctrl",))),
        ("shift+a", "A", ("A", ())),
        ("plus", "+", ("+", ())),
        ("space", " ", (" ", ())),
        ("f5", None, ("F5", ())),
    ],
)
def test_normalize_textual_key(key: str, character: str | None, expected: tuple) -> None:
    assert normalize_textual_key(key, character) == expected


def test_adapter_rolls_and_reports_status() -> None:
    snapshots: List[EditorSnapshot] = []
    statuses: List[str] = []
    events: List[tuple[str, object | None]] = []
    adapter = make_adapter(snapshots, statuses, events)

    result = adapter.handle_textual_key("up")

    assert result.status == "applied"
    assert statuses[-1] == "roll.up:applied"
    assert snapshots[-1].text == "2024-01-01T00:00:01"
    assert ("value.change", START + 1000) in events
    assert not adapter.editor.timers.active("repeat")


def test_adapter_copies_through_hook() -> None:
    copied: List[str] = []
    statuses: List[str] = []
    adapter = make_adapter([], statuses, copied=copied)

    adapter.handle_textual_key("ctrl+c")

    assert copied == ["2024-01-01T00:00:00"]
    assert statuses[-1] == "clipboard.copy:copied"


def test_adapter_paste_reports_rejection() -> None:
    statuses: List[str] = []
    adapter = make_adapter([], statuses)

    assert not adapter.paste("not a date")
    assert statuses[-1] == "clipboard.paste:rejected"
    assert adapter.paste("2025-05-05T05:05:05")
    assert statuses[-1] == "clipboard.paste:pasted"


def test_adapter_surfaces_validation_messages() -> None:
    statuses: List[str] = []
    adapter = make_adapter([], statuses)

    adapter.editor.max = "2020"

    assert statuses[-1] == "Year must not be after 2020"


def test_adapter_logs_key_flow() -> None:
    lines: List[str] = []
    adapter = make_adapter([], [], lines=lines)

    assert lines[0].startswith("keymaps -> ")
    assert "bindings=17" in lines[0]
    del lines[:]

    adapter.handle_textual_key("left")

    assert lines[0].startswith("key -> ")
    assert "key='ArrowLeft'" in lines[0]
    assert lines[-1].startswith("result <- ")
