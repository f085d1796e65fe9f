"""Built-in command catalog.

Static table of palette commands (navigation, player, settings, help).
Each command carries an action tag plus parameters; the activation
dispatcher routes the tag to a handler registered by the host app.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from tunepalette.models import ResultType, SearchResult

CATEGORIES = ("navigation", "player", "settings", "help")


@dataclass(frozen=True)
class Command:
    """A static palette command.

    ``transient`` commands (help panels) are never written to the recency
    store. ``quick_access`` commands fill the empty-query view when there
    is no history yet.
    """

    id: str
    label: str
    category: str
    action: str
    shortcut: str | None = None
    params: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    quick_access: bool = False
    transient: bool = False

    def to_result(self) -> SearchResult:
        return SearchResult(
            id=self.id,
            type=ResultType.COMMAND,
            title=self.label,
            subtitle=self.category.title(),
            image=None,
            data={
                "action": self.action,
                "category": self.category,
                "shortcut": self.shortcut,
                "params": dict(self.params),
                "transient": self.transient,
            },
        )


BUILTIN_COMMANDS: tuple[Command, ...] = (
    Command("nav.home", "Go to Home", "navigation", "navigate",
            shortcut="g h", params={"target": "home"}, quick_access=True),
    Command("nav.library", "Go to Your Library", "navigation", "navigate",
            shortcut="g l", params={"target": "library"}, quick_access=True),
    Command("nav.search", "Search Music", "navigation", "navigate",
            shortcut="/", params={"target": "search"}),
    Command("nav.liked", "Open Liked Songs", "navigation", "navigate",
            params={"target": "liked"}, quick_access=True),
    Command("player.toggle", "Play / Pause", "player", "player",
            shortcut="space", params={"op": "toggle"}, quick_access=True),
    Command("player.next", "Next Track", "player", "player",
            shortcut="shift+right", params={"op": "next"}),
    Command("player.previous", "Previous Track", "player", "player",
            shortcut="shift+left", params={"op": "previous"}),
    Command("player.shuffle", "Shuffle Playlist", "player", "player",
            shortcut="s", params={"op": "shuffle"}),
    Command("player.repeat", "Toggle Repeat", "player", "player",
            shortcut="r", params={"op": "repeat"}),
    Command("settings.theme", "Toggle Dark Mode", "settings", "toggle_setting",
            shortcut="ctrl+t", params={"setting": "dark_mode"}),
    Command("settings.explicit", "Toggle Explicit Content", "settings",
            "toggle_setting", params={"setting": "explicit_content"}),
    Command("settings.autoplay", "Toggle Autoplay", "settings", "toggle_setting",
            params={"setting": "autoplay"}),
    Command("help.shortcuts", "Keyboard Shortcuts", "help", "help",
            shortcut="?", params={"topic": "shortcuts"}, transient=True),
    Command("help.about", "About", "help", "help",
            params={"topic": "about"}, transient=True),
)


class CommandCatalog:
    """In-memory, ordered command table."""

    def __init__(self, commands: Iterable[Command] = BUILTIN_COMMANDS) -> None:
        self._commands: tuple[Command, ...] = tuple(commands)
        self._by_id = {c.id: c for c in self._commands}
        if len(self._by_id) != len(self._commands):
            raise ValueError("command ids must be unique")

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def get(self, command_id: str) -> Command | None:
        return self._by_id.get(command_id)

    def match(self, query: str) -> list[Command]:
        """Commands whose label or category contains *query*, case-insensitive.

        Catalog order is preserved. An empty query matches nothing.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            c
            for c in self._commands
            if needle in c.label.lower() or needle in c.category.lower()
        ]

    def quick_access(self) -> list[Command]:
        return [c for c in self._commands if c.quick_access]
