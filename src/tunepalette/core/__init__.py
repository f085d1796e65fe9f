"""Palette core: query controller, selection model, activation dispatcher."""

from tunepalette.core.controller import QueryController
from tunepalette.core.dispatcher import ActivationDispatcher, Navigator, Player
from tunepalette.core.palette import CommandPalette
from tunepalette.core.selection import SelectionModel

__all__ = [
    "ActivationDispatcher",
    "CommandPalette",
    "Navigator",
    "Player",
    "QueryController",
    "SelectionModel",
]
