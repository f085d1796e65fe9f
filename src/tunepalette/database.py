"""SQLite database layer for persisted palette state.

Manages schema initialization, WAL mode pragmas, and whole-list
replacement of the recents table.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from tunepalette.models import RecencyEntry, ResultType

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS recents (
    item_type TEXT NOT NULL
        CHECK(item_type IN ('track', 'album', 'artist', 'playlist', 'command')),
    item_id TEXT NOT NULL,
    title TEXT NOT NULL,
    subtitle TEXT NOT NULL DEFAULT '',
    image TEXT,
    data_json TEXT NOT NULL DEFAULT '{}',
    last_used_at REAL NOT NULL,
    -- 0 = most recently used
    position INTEGER NOT NULL,
    PRIMARY KEY (item_type, item_id)
);

CREATE INDEX IF NOT EXISTS idx_recents_position ON recents(position);
"""

SCHEMA_VERSION = 1


class Database:
    """SQLite connection wrapper for the palette's persisted state.

    Usage::

        with Database("data/palette.db") as db:
            db.replace_recents(entries)
            entries = db.get_recents()
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self._setup_pragmas()
        self._setup_schema()

    def _setup_pragmas(self) -> None:
        """Configure SQLite pragmas for durability without fsync stalls."""
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA synchronous=NORMAL")
        self.conn.execute("PRAGMA temp_store=MEMORY")

        result = self.conn.execute("PRAGMA journal_mode").fetchone()[0]
        if result != "wal" and self.db_path != ":memory:":
            logger.warning("WAL mode not enabled, got: %s", result)

    def _setup_schema(self) -> None:
        self.conn.executescript(SCHEMA_SQL)
        self.conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        self.conn.commit()

    def get_recents(self) -> list[RecencyEntry]:
        """Return stored recents, most recently used first.

        Rows with an unknown item type or corrupt JSON payload are skipped
        with a warning.
        """
        rows = self.conn.execute(
            "SELECT item_type, item_id, title, subtitle, image, data_json, last_used_at "
            "FROM recents ORDER BY position ASC"
        ).fetchall()

        entries: list[RecencyEntry] = []
        for row in rows:
            try:
                entries.append(
                    RecencyEntry(
                        id=row["item_id"],
                        type=ResultType(row["item_type"]),
                        title=row["title"],
                        subtitle=row["subtitle"],
                        image=row["image"],
                        last_used_at=row["last_used_at"],
                        data=json.loads(row["data_json"]),
                    )
                )
            except (ValueError, TypeError) as e:
                logger.warning(
                    "Skipping unreadable recent %s:%s: %s",
                    row["item_type"],
                    row["item_id"],
                    e,
                )
        return entries

    def replace_recents(self, entries: list[RecencyEntry]) -> None:
        """Replace the whole recents table in a single transaction."""
        rows = [
            (
                e.type.value,
                e.id,
                e.title,
                e.subtitle,
                e.image,
                json.dumps(e.data, ensure_ascii=False),
                e.last_used_at,
                position,
            )
            for position, e in enumerate(entries)
        ]
        with self.conn:
            self.conn.execute("DELETE FROM recents")
            self.conn.executemany(
                """INSERT INTO recents
                   (item_type, item_id, title, subtitle, image, data_json,
                    last_used_at, position)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                rows,
            )

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()
