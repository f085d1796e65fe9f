"""Results list widget for the command palette.

ResultRow renders one SearchResult with its type badge. ResultsList
renders the palette's buckets with section headers and the empty,
loading, error and no-results states.
"""

from __future__ import annotations

from rich.text import Text
from textual import events
from textual.containers import VerticalScroll
from textual.widgets import Static

from tunepalette.core.palette import CommandPalette
from tunepalette.models import ResultType, SearchResult
from tunepalette.tui.messages import ResultClicked, ResultHovered

TYPE_LABELS = {
    ResultType.TRACK: "Track",
    ResultType.ALBUM: "Album",
    ResultType.ARTIST: "Artist",
    ResultType.PLAYLIST: "Playlist",
    ResultType.COMMAND: "Command",
}

TYPE_STYLES = {
    ResultType.TRACK: "bold green",
    ResultType.ALBUM: "bold blue",
    ResultType.ARTIST: "bold magenta",
    ResultType.PLAYLIST: "bold yellow",
    ResultType.COMMAND: "bold white",
}


def section_title(palette: CommandPalette, section: str) -> str:
    if section == "exact":
        return "Top Results"
    if section == "recommendations":
        return "Recommendations" if palette.buckets.exact_matches else "Search Results"
    if section == "recent":
        return "Recent"
    return "Quick Access"


class ResultRow(Static):
    """One palette row: title, subtitle, type badge, shortcut when selected."""

    DEFAULT_CSS = """
    ResultRow {
        padding: 0 1;
        height: auto;
    }
    ResultRow:hover {
        background: $primary-background;
    }
    ResultRow.-selected {
        background: $accent 30%;
        border-right: thick $accent;
    }
    """

    def __init__(self, result: SearchResult, index: int, selected: bool = False) -> None:
        self.result = result
        self.result_index = index

        display = Text()
        display.append(result.title, style="bold")
        label = TYPE_LABELS.get(result.type, "")
        display.append(f"  [{label}]", style=TYPE_STYLES.get(result.type, ""))
        shortcut = result.data.get("shortcut") if result.type is ResultType.COMMAND else None
        if selected and shortcut:
            display.append(f"  {shortcut}", style="reverse")
        if result.subtitle:
            display.append("\n")
            display.append(result.subtitle, style="dim")

        super().__init__(display, classes="-selected" if selected else None)

    def on_click(self, event: events.Click) -> None:
        event.stop()
        self.post_message(ResultClicked(self.result_index))

    def on_enter(self, event: events.Enter) -> None:
        self.post_message(ResultHovered(self.result_index))


class ResultsList(VerticalScroll):
    """Scrollable palette body, rebuilt from palette state on every change."""

    DEFAULT_CSS = """
    ResultsList {
        height: auto;
        max-height: 20;
    }
    ResultsList .section {
        color: $text-muted;
        text-style: bold;
        padding: 1 1 0 1;
    }
    ResultsList .status {
        color: $text-muted;
        text-align: center;
        padding: 1;
    }
    ResultsList .error {
        color: $error;
        text-align: center;
        padding: 1;
    }
    """

    def __init__(self) -> None:
        super().__init__(id="palette-results")
        self.status_text: str = ""

    def show(self, palette: CommandPalette) -> None:
        """Re-render from the palette's current state."""
        self.remove_children()

        if palette.error:
            self._status("Search failed. Please try again.", "error")
            return

        items = palette.all_results
        if palette.query.strip() and not items:
            if palette.is_loading:
                self._status("Searching...")
            else:
                self._status(
                    f'No results found for "{palette.query.strip()}"\n'
                    "Try different keywords or phrases"
                )
            return

        current = None
        for index, result in enumerate(items):
            section = palette.buckets.section_of(index)
            if section != current:
                current = section
                self.mount(Static(section_title(palette, section), classes="section"))
            self.mount(ResultRow(result, index, selected=index == palette.selected_index))

        if palette.is_loading:
            self.mount(Static("Searching...", classes="status"))
        self.status_text = ""

    def _status(self, text: str, kind: str = "status") -> None:
        self.status_text = text
        self.mount(Static(text, classes=kind))
