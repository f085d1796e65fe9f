"""tunepalette TUI application.

A small host app around the palette: it shows what is playing, the
current page and the settings, and supplies the playback, navigation and
command-handler capabilities the palette dispatches to.
"""

from __future__ import annotations

from typing import Any, Mapping

from rich.text import Text
from textual.app import App, ComposeResult
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from tunepalette.commands import CommandCatalog
from tunepalette.config import PaletteConfig
from tunepalette.core.dispatcher import ActivationDispatcher
from tunepalette.core.palette import CommandPalette
from tunepalette.models import SearchResult
from tunepalette.recency import MemoryRecentsBackend, RecencyStore, RecentsBackend
from tunepalette.services.search import SearchGateway
from tunepalette.telemetry import Telemetry, set_telemetry
from tunepalette.tui.palette_screen import PaletteScreen

HELP_TOPICS = {
    "shortcuts": "ctrl+k  search   ↑/↓  move   enter  select   esc  close   ctrl+q  quit",
    "about": "tunepalette: keyboard-driven search for your music catalog.",
}


class PaletteApp(App):
    """Host application with a modal command palette on ctrl+k."""

    TITLE = "tunepalette"
    SUB_TITLE = "Search music and commands"
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #status-bar {
        dock: bottom;
        height: 1;
        background: $primary-background;
        padding: 0 1;
    }
    #main-view {
        padding: 1 2;
    }
    """

    BINDINGS = [
        ("ctrl+k", "open_palette", "Search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    now_playing: reactive[str | None] = reactive(None)
    is_playing: reactive[bool] = reactive(False)
    page: reactive[str] = reactive("home")
    help_text: reactive[str] = reactive("")

    def __init__(
        self,
        gateway: SearchGateway | None = None,
        recents_backend: RecentsBackend | None = None,
        config: PaletteConfig | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        """Build the palette core around this app's capabilities.

        Args:
            gateway: Catalog search facade. None runs commands-only.
            recents_backend: Persistence for recent items (in-memory if None).
            config: Palette tuning (defaults if None).
            telemetry: OTel facade. Defaults to no-op.
        """
        super().__init__()
        self.gateway = gateway
        self.config = config or PaletteConfig()
        self.telemetry = telemetry if telemetry is not None else Telemetry()
        set_telemetry(self.telemetry)
        self.settings: dict[str, bool] = {
            "dark_mode": True,
            "explicit_content": True,
            "autoplay": False,
            "shuffle": False,
            "repeat": False,
        }
        self.recents = RecencyStore(
            recents_backend or MemoryRecentsBackend(),
            capacity=self.config.recent_capacity,
        )
        self.dispatcher = ActivationDispatcher(
            self.recents,
            player=self,
            navigator=self,
            handlers={
                "navigate": self.run_navigate_command,
                "player": self.run_player_command,
                "toggle_setting": self.run_toggle_command,
                "help": self.run_help_command,
            },
            telemetry=self.telemetry,
        )
        self.palette = CommandPalette(
            gateway,
            self.recents,
            self.dispatcher,
            catalog=CommandCatalog(),
            config=self.config,
            on_close=self._on_palette_closed,
            telemetry=self.telemetry,
        )

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="main-view")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self._render_main()

    async def on_unmount(self) -> None:
        """Release the catalog HTTP session."""
        close = getattr(self.gateway, "close", None)
        if close is not None:
            await close()

    # ------------------------------------------------------------------
    # Palette lifecycle
    # ------------------------------------------------------------------

    def action_open_palette(self) -> None:
        if isinstance(self.screen, PaletteScreen):
            return
        self.push_screen(PaletteScreen(self.palette))

    def _on_palette_closed(self) -> None:
        if isinstance(self.screen, PaletteScreen):
            self.pop_screen()

    # ------------------------------------------------------------------
    # Capabilities supplied to the dispatcher
    # ------------------------------------------------------------------

    def play_track(self, track: Mapping[str, Any]) -> None:
        name = track.get("name") or track.get("id") or "Unknown track"
        artists = ", ".join(a.get("name", "") for a in track.get("artists", []))
        self.now_playing = f"{name} by {artists}" if artists else str(name)
        self.is_playing = True

    def navigate_to(self, target_type: str, target_id: str) -> None:
        self.page = f"{target_type}/{target_id}"

    def run_navigate_command(self, result: SearchResult) -> None:
        target = result.data.get("params", {}).get("target", "home")
        self.navigate_to("page", target)

    def run_player_command(self, result: SearchResult) -> None:
        op = result.data.get("params", {}).get("op")
        if op == "toggle":
            self.is_playing = not self.is_playing and self.now_playing is not None
        elif op in ("shuffle", "repeat"):
            self.settings[op] = not self.settings[op]
            self._render_main()
        elif op in ("next", "previous"):
            self.notify(f"{op.title()} track")

    def run_toggle_command(self, result: SearchResult) -> None:
        setting = result.data.get("params", {}).get("setting")
        if setting not in self.settings:
            self.notify(f"Unknown setting: {setting}", severity="warning")
            return
        self.settings[setting] = not self.settings[setting]
        if setting == "dark_mode":
            self.theme = "textual-dark" if self.settings[setting] else "textual-light"
        self._render_main()

    def run_help_command(self, result: SearchResult) -> None:
        topic = result.data.get("params", {}).get("topic", "shortcuts")
        self.help_text = HELP_TOPICS.get(topic, "")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def watch_now_playing(self, _: str | None) -> None:
        self._render_main()

    def watch_is_playing(self, _: bool) -> None:
        self._render_main()

    def watch_page(self, _: str) -> None:
        self._render_main()

    def watch_help_text(self, _: str) -> None:
        self._render_main()

    def _render_main(self) -> None:
        try:
            main = self.query_one("#main-view", Static)
            status = self.query_one("#status-bar", Static)
        except Exception:
            return  # Not composed yet

        text = Text()
        text.append("Page: ", style="bold")
        text.append(f"{self.page}\n")
        text.append("Now playing: ", style="bold")
        if self.now_playing:
            state = "▶" if self.is_playing else "⏸"
            text.append(f"{state} {self.now_playing}\n")
        else:
            text.append("nothing\n", style="dim")
        enabled = [name for name, on in self.settings.items() if on]
        text.append("Settings: ", style="bold")
        text.append(", ".join(enabled) or "none")
        if self.help_text:
            text.append("\n\n")
            text.append(self.help_text, style="italic")
        main.update(text)
        status.update(f"{len(self.recents)} recent | ctrl+k: Search")
