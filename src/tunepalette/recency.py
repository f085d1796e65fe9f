"""Recency store: bounded, persisted most-recently-used list.

Entries are deduplicated by ``(type, id)``; re-recording an existing
item moves it to the front. The list is loaded once at construction and
written back through the backend after every mutation.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from tunepalette.constants import RECENT_CAPACITY
from tunepalette.models import RecencyEntry, SearchResult

logger = logging.getLogger(__name__)


class RecentsBackend(Protocol):
    """Persistence boundary for recent items."""

    def load_recents(self) -> list[RecencyEntry]: ...

    def save_recents(self, entries: list[RecencyEntry]) -> None: ...


class MemoryRecentsBackend:
    """Non-durable backend; keeps the last saved list in memory."""

    def __init__(self, entries: list[RecencyEntry] | None = None) -> None:
        self.entries: list[RecencyEntry] = list(entries or [])
        self.save_count = 0

    def load_recents(self) -> list[RecencyEntry]:
        return list(self.entries)

    def save_recents(self, entries: list[RecencyEntry]) -> None:
        self.entries = list(entries)
        self.save_count += 1


class SqliteRecentsBackend:
    """Backend storing recents in the palette's SQLite database.

    A connection is opened per operation so the backend can be created
    before the event loop starts and shared freely.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def load_recents(self) -> list[RecencyEntry]:
        from tunepalette.database import Database

        with Database(self._db_path) as db:
            return db.get_recents()

    def save_recents(self, entries: list[RecencyEntry]) -> None:
        from tunepalette.database import Database

        with Database(self._db_path) as db:
            db.replace_recents(entries)


class RecencyStore:
    """Capacity-bounded, deduplicated MRU list of activated items.

    Usage::

        store = RecencyStore(SqliteRecentsBackend("data/palette.db"))
        store.record(result)
        store.entries[0]  # -> the entry for result
    """

    def __init__(
        self,
        backend: RecentsBackend,
        capacity: int = RECENT_CAPACITY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._backend = backend
        self._capacity = capacity
        self._clock = clock
        self._entries: list[RecencyEntry] = self._load()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> list[RecencyEntry]:
        """Snapshot of the entries, most recently used first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self) -> list[RecencyEntry]:
        try:
            loaded = self._backend.load_recents()
        except Exception as e:
            logger.warning("Failed to load recent items, starting empty: %s", e)
            return []
        return self._normalize(loaded)

    def _normalize(self, entries: list[RecencyEntry]) -> list[RecencyEntry]:
        """Order by last use, drop duplicate keys and trim to capacity."""
        ordered = sorted(entries, key=lambda e: e.last_used_at, reverse=True)
        seen: set[tuple[str, str]] = set()
        result: list[RecencyEntry] = []
        for entry in ordered:
            if entry.key in seen:
                continue
            seen.add(entry.key)
            result.append(entry)
        return result[: self._capacity]

    def record(self, result: SearchResult) -> RecencyEntry:
        """Front-insert *result*, removing any older entry with the same key.

        The new list is built in full and swapped in afterwards, so readers
        never observe a half-applied splice. Persistence failures are logged;
        the in-memory list keeps the update.
        """
        now = self._clock()
        if self._entries and now < self._entries[0].last_used_at:
            # Keep last_used_at monotonic when the clock steps backwards.
            now = self._entries[0].last_used_at
        entry = RecencyEntry.from_result(result, used_at=now)
        updated = [entry] + [e for e in self._entries if e.key != entry.key]
        self._entries = updated[: self._capacity]
        self._persist()
        return entry

    def _persist(self) -> None:
        try:
            self._backend.save_recents(list(self._entries))
        except Exception as e:
            logger.warning("Failed to save recent items: %s", e)
