"""Palette widgets."""

from tunepalette.tui.widgets.results import ResultRow, ResultsList

__all__ = ["ResultRow", "ResultsList"]
