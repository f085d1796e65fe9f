"""Selection model: one clamped index over the flattened result list."""

from __future__ import annotations

from tunepalette.models import ResultBuckets, SearchResult


class SelectionModel:
    """Keyboard selection over ``ResultBuckets.flatten()``.

    The index is positional across the concatenated list, never
    bucket-local. It resets to 0 whenever a new list arrives and is always
    in ``[0, total_count)``, or 0 with nothing selected when the list is
    empty. Navigation never wraps and never raises.
    """

    def __init__(self) -> None:
        self._items: list[SearchResult] = []
        self._buckets = ResultBuckets()
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def items(self) -> list[SearchResult]:
        return list(self._items)

    @property
    def buckets(self) -> ResultBuckets:
        return self._buckets

    @property
    def total_count(self) -> int:
        return len(self._items)

    @property
    def is_idle(self) -> bool:
        return not self._items

    @property
    def selected(self) -> SearchResult | None:
        if not self._items:
            return None
        return self._items[self._index]

    def set_buckets(self, buckets: ResultBuckets) -> None:
        """Adopt new buckets, recompute the flat list and reset to the top."""
        self._buckets = buckets
        self._items = buckets.flatten()
        self._index = 0

    def move_down(self) -> None:
        if self._items:
            self._index = min(self._index + 1, len(self._items) - 1)

    def move_up(self) -> None:
        if self._items:
            self._index = max(self._index - 1, 0)

    def select(self, index: int) -> None:
        """Point at *index* (pointer hover), clamped into range."""
        if self._items:
            self._index = min(max(index, 0), len(self._items) - 1)

    def refresh(self, buckets: ResultBuckets) -> None:
        """Adopt re-rendered buckets for the same list, keeping the index."""
        self._buckets = buckets
        self._items = buckets.flatten()
        if not self._items:
            self._index = 0
        else:
            self._index = min(self._index, len(self._items) - 1)
