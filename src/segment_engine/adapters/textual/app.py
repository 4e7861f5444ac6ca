"""Executable Textual app that hosts a time editor and an angle editor."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use segment_engine.adapters.textual.app"
    ) from exc

from segment_engine.engine.editor import EditorSnapshot, SegmentEditor
from segment_engine.runtime import telemetry
from segment_engine.runtime.broadcast import EditorBroadcast

from .controller import TextualSegmentAdapter, TextualUIHooks

TIMER_POLL_SECONDS = 0.05


def create_default_editors(
    broadcast: EditorBroadcast,
    *,
    time_preset: str = "iso",
    angle_style: str = "DDD_MM_SS",
    rtl: bool = False,
) -> List[SegmentEditor]:
    """Build the demo's time and angle editors around one broadcast."""

    time_editor = SegmentEditor.time(
        [time_preset, {"rtl": rtl}],
        value="2024-02-29T14:59:59Z",
        broadcast=broadcast,
        name="time",
    )
    angle_editor = SegmentEditor.angle(
        {"angle_style": angle_style, "compass": True, "rtl": rtl},
        value=-45.5,
        broadcast=broadcast,
        name="angle",
    )
    return [time_editor, angle_editor]


def render_snapshot(snapshot: EditorSnapshot) -> str:
    """Textual markup for one editor frame; the selected field is reversed."""

    parts: List[str] = []
    for view in snapshot.fields:
        text = view.text.replace("[", r"\[")
        parts.append(f"[reverse]{text}[/reverse]" if view.selected else text)
    return f"{''.join(parts)}  [dim]{snapshot.feedback}[/dim]"


@dataclass
class UIState:
    editor_text: List[str] = field(default_factory=list)
    status_text: str = ""


class SegmentEngineApp(App[None]):
    """Minimal Textual UI embedding the segmented editors."""

    CSS = """
	Screen {
		layout: vertical;
	}

	.editor-view {
		height: 3;
		border: round $accent;
		padding: 0 1;
	}

	.editor-view.focused {
		border: round $success;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("tab", "next_editor", "Next editor"),
        ("ctrl+t", "toggle_theme", "Dark mode"),
    ]

    def __init__(
        self,
        *,
        time_preset: str = "iso",
        angle_style: str = "DDD_MM_SS",
        rtl: bool = False,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self.broadcast = EditorBroadcast()
        self.editors = create_default_editors(
            self.broadcast, time_preset=time_preset, angle_style=angle_style, rtl=rtl
        )
        self.adapters: List[TextualSegmentAdapter] = []
        self.active = 0
        self._editor_widgets: List[Static] = []
        self._status_widget: Static | None = None
        self._logger = telemetry.get_logger("segment_engine.textual")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="editor-area"):
            for editor in self.editors:
                widget = Static("", id=f"editor-{editor.name}", classes="editor-view")
                widget.border_title = editor.name
                self._editor_widgets.append(widget)
                yield widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        for position, editor in enumerate(self.editors):
            hooks = TextualUIHooks(
                update_fields=lambda snapshot, i=position: self._update_fields(i, snapshot),
                update_status=self._update_status,
                handle_event=self._handle_event,
                copy_to_clipboard=self.copy_to_clipboard,
                log=self._log_line,
            )
            self.adapters.append(TextualSegmentAdapter(editor, hooks))
        self._activate(0)
        self.set_interval(TIMER_POLL_SECONDS, self._process_timers)

    async def on_unmount(self) -> None:
        for editor in self.editors:
            editor.dispose()

    def _process_timers(self) -> None:
        for adapter in self.adapters:
            adapter.process_timers()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapters or event.key in {"ctrl+q", "tab", "ctrl+t"}:
            return
        self.adapters[self.active].handle_textual_key(event.key, character=event.character)
        event.stop()

    async def on_paste(self, event: events.Paste) -> None:
        if self.adapters:
            self.adapters[self.active].paste(event.text)

    def action_next_editor(self) -> None:
        self._activate((self.active + 1) % len(self.adapters))

    def action_toggle_theme(self) -> None:
        self.broadcast.set_theme(not self.broadcast.dark)

    def _activate(self, position: int) -> None:
        if self.adapters:
            self.adapters[self.active].blur()
        self.active = position
        for index, widget in enumerate(self._editor_widgets):
            widget.set_class(index == position, "focused")
        self.adapters[position].focus()

    def _update_fields(self, position: int, snapshot: EditorSnapshot) -> None:
        text = render_snapshot(snapshot)
        while len(self._state.editor_text) <= position:
            self._state.editor_text.append("")
        self._state.editor_text[position] = text
        if position < len(self._editor_widgets):
            self._editor_widgets[position].update(text)

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name == "value.change":
            self._update_status(f"{name}:{payload}")

    def _log_line(self, line: str) -> None:
        self._logger.debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the segment-engine Textual demo.")
    parser.add_argument(
        "--time-preset",
        default=os.environ.get("SEGMENT_ENGINE_TIME_PRESET", "iso"),
        choices=("iso", "iso_date", "date_only"),
        help="Named time-editor preset (default: iso)",
    )
    parser.add_argument(
        "--angle-style",
        default=os.environ.get("SEGMENT_ENGINE_ANGLE_STYLE", "DDD_MM_SS"),
        help="Angle style name, e.g. DD_MM_SS or DDD (default: DDD_MM_SS)",
    )
    parser.add_argument(
        "--rtl",
        action="store_true",
        help="Lay the editors out right-to-left",
    )
    parser.add_argument(
        "--log-preset",
        default=None,
        help="telelog preset passed to telemetry.configure",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    app = SegmentEngineApp(
        time_preset=args.time_preset,
        angle_style=args.angle_style,
        rtl=args.rtl,
    )
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
