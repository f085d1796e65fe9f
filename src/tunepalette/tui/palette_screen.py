"""Modal palette screen.

Feeds input changes and the four palette commands into the
CommandPalette core and re-renders the results list whenever the core
reports a change.
"""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from tunepalette.core.palette import CommandPalette
from tunepalette.models import PaletteCommand
from tunepalette.tui.messages import ResultClicked, ResultHovered
from tunepalette.tui.widgets import ResultsList

logger = logging.getLogger(__name__)


class PaletteScreen(ModalScreen[None]):
    """Overlay hosting the palette input and results."""

    DEFAULT_CSS = """
    PaletteScreen {
        align: center top;
        background: $background 60%;
    }
    #palette {
        width: 80;
        max-width: 100%;
        height: auto;
        margin-top: 3;
        border: round $accent;
        background: $surface;
    }
    #palette-input {
        border: none;
        border-bottom: solid $primary;
    }
    #palette-footer {
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("escape", "palette_command('close')", "Close"),
        ("up", "palette_command('move_up')", "Up"),
        ("down", "palette_command('move_down')", "Down"),
    ]

    def __init__(self, palette: CommandPalette) -> None:
        super().__init__()
        self.palette = palette
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        with Vertical(id="palette"):
            yield Input(placeholder="Search music and artists...", id="palette-input")
            yield ResultsList()
            yield Static(
                "↑↓ navigate   ↵ select   esc close",
                id="palette-footer",
            )

    def on_mount(self) -> None:
        self._unsubscribe = self.palette.subscribe(lambda _: self._refresh())
        self.palette.open()
        self.query_one(Input).focus()
        logger.debug("Palette opened")

    def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        # Screen dismissed by the host rather than by a palette command.
        self.palette.close()

    def _refresh(self) -> None:
        if not self.palette.is_open:
            return
        self.query_one(ResultsList).show(self.palette)

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.palette.on_query_change(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.palette.handle(PaletteCommand.CONFIRM)

    def on_result_clicked(self, event: ResultClicked) -> None:
        items = self.palette.all_results
        if 0 <= event.index < len(items):
            self.palette.activate(items[event.index])

    def on_result_hovered(self, event: ResultHovered) -> None:
        if event.index != self.palette.selected_index:
            self.palette.select(event.index)

    def action_palette_command(self, name: str) -> None:
        self.palette.handle(PaletteCommand(name))
