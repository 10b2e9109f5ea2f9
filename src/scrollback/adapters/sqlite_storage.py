"""SQLite storage adapter.

Implements the core ReadStatePort using a simple SQLite database. The
adapter plays the role of the remote store, so it also stamps the
"server-observed" time on every mark.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Callable, Optional

from scrollback.core.errors import TransientFetchError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SQLiteReadStateStorage:
    """Thin SQLite wrapper that satisfies the ReadStatePort contract."""

    def __init__(self, db_path: str, clock: Callable[[], datetime] = _utcnow) -> None:
        self._db_path = db_path
        self._clock = clock

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist."""

        with self._connect() as conn:
            # read_state keeps one record per (user, room).
            # Fields:
            # - last_read: most recent mark, ISO-8601 with offset
            # - first_read: set on the first mark and never touched again
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS read_state (
                    user_id TEXT NOT NULL,
                    room_id TEXT NOT NULL,
                    last_read TIMESTAMP NOT NULL,
                    first_read TIMESTAMP NOT NULL,
                    PRIMARY KEY (user_id, room_id)
                )
                """
            )

    async def get_last_read(self, user_id: str, room_id: str) -> Optional[datetime]:
        """Return the last-read instant for (user, room), if any."""

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT last_read FROM read_state WHERE user_id = ? AND room_id = ?",
                    (user_id, room_id),
                ).fetchone()
        except sqlite3.Error as exc:
            raise TransientFetchError(f"Failed to read state for {room_id}") from exc
        return datetime.fromisoformat(row["last_read"]) if row else None

    async def mark_read(self, user_id: str, room_id: str) -> datetime:
        """Merge the current time into the record; other columns are kept."""

        now = self._clock()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO read_state (user_id, room_id, last_read, first_read)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(user_id, room_id) DO UPDATE SET last_read = excluded.last_read
                    """,
                    (user_id, room_id, now.isoformat(), now.isoformat()),
                )
        except sqlite3.Error as exc:
            raise TransientFetchError(f"Failed to mark {room_id} read") from exc
        return now

    def get_first_read(self, user_id: str, room_id: str) -> Optional[datetime]:
        """Return when (user, room) was first marked read, if ever."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT first_read FROM read_state WHERE user_id = ? AND room_id = ?",
                (user_id, room_id),
            ).fetchone()
        return datetime.fromisoformat(row["first_read"]) if row else None
