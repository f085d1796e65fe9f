"""Custom Textual messages for palette widgets.

Widgets post these to the palette screen, which forwards them to the
CommandPalette core. No widget calls the core directly.
"""

from __future__ import annotations

from textual.message import Message


class ResultClicked(Message):
    """Fired when the user clicks a palette row."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__()


class ResultHovered(Message):
    """Fired when the pointer moves over a palette row."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__()
