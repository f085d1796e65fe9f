"""Command-palette search and ranking engine for a music client."""

__version__ = "0.1.0"

from tunepalette.models import (
    PaletteCommand,
    RawResult,
    RecencyEntry,
    ResultBuckets,
    ResultType,
    SearchResult,
)

__all__ = [
    "PaletteCommand",
    "RawResult",
    "RecencyEntry",
    "ResultBuckets",
    "ResultType",
    "SearchResult",
    "__version__",
]
