"""Data models and enums for the command palette."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResultType(str, Enum):
    """Kind of item a palette row represents."""

    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    COMMAND = "command"


MUSIC_TYPES = frozenset(
    {ResultType.TRACK, ResultType.ALBUM, ResultType.ARTIST, ResultType.PLAYLIST}
)


class PaletteCommand(str, Enum):
    """Discrete keyboard commands accepted by the palette."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    CONFIRM = "confirm"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One row of the merged result list.

    ``id`` is only unique within its ``type``; ``key`` is the namespaced
    identity used for every dedupe decision.
    """

    id: str
    type: ResultType
    title: str
    subtitle: str = ""
    image: str | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.type.value, self.id)


@dataclass(frozen=True, slots=True)
class RawResult:
    """An item returned by the Search Gateway.

    ``related`` marks items the upstream ranked as similar to the query
    even without a literal text match.
    """

    id: str
    type: ResultType
    title: str
    subtitle: str = ""
    image: str | None = None
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    related: bool = False

    def to_result(self) -> SearchResult:
        return SearchResult(
            id=self.id,
            type=self.type,
            title=self.title,
            subtitle=self.subtitle,
            image=self.image,
            data=dict(self.payload),
        )


@dataclass(frozen=True, slots=True)
class RecencyEntry:
    """A previously activated item, persisted across sessions."""

    id: str
    type: ResultType
    title: str
    subtitle: str = ""
    image: str | None = None
    last_used_at: float = 0.0
    data: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.type.value, self.id)

    @classmethod
    def from_result(
        cls, result: SearchResult, used_at: float | None = None
    ) -> RecencyEntry:
        return cls(
            id=result.id,
            type=result.type,
            title=result.title,
            subtitle=result.subtitle,
            image=result.image,
            last_used_at=time.time() if used_at is None else used_at,
            data=dict(result.data),
        )

    def to_result(self) -> SearchResult:
        return SearchResult(
            id=self.id,
            type=self.type,
            title=self.title,
            subtitle=self.subtitle,
            image=self.image,
            data=dict(self.data),
        )


@dataclass(slots=True)
class ResultBuckets:
    """Classified palette contents.

    A non-empty query fills ``exact_matches`` and ``recommendations``.
    An empty query fills ``recent_items``, or ``quick_access`` when there
    is nothing recent to show.
    """

    exact_matches: list[SearchResult] = field(default_factory=list)
    recommendations: list[SearchResult] = field(default_factory=list)
    recent_items: list[SearchResult] = field(default_factory=list)
    quick_access: list[SearchResult] = field(default_factory=list)

    def flatten(self) -> list[SearchResult]:
        """Return the navigable list the selection index addresses."""
        if self.exact_matches or self.recommendations:
            return [*self.exact_matches, *self.recommendations]
        if self.recent_items:
            return list(self.recent_items)
        return list(self.quick_access)

    def section_of(self, index: int) -> str | None:
        """Name the section a flat index falls in, or None if out of range."""
        if index < 0:
            return None
        if self.exact_matches or self.recommendations:
            if index < len(self.exact_matches):
                return "exact"
            if index < len(self.exact_matches) + len(self.recommendations):
                return "recommendations"
            return None
        if self.recent_items:
            return "recent" if index < len(self.recent_items) else None
        return "quick_access" if index < len(self.quick_access) else None

    def __len__(self) -> int:
        return len(self.flatten())
