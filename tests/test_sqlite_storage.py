from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from scrollback.adapters.sqlite_storage import SQLiteReadStateStorage


class SteppingClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=30)
        return value


def test_read_state_roundtrip_and_merge(tmp_path) -> None:
    start = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    storage = SQLiteReadStateStorage(str(tmp_path / "reads.db"), clock=SteppingClock(start))
    storage.init_db()

    async def scenario() -> tuple:
        missing = await storage.get_last_read("me", "@room")
        first = await storage.mark_read("me", "@room")
        second = await storage.mark_read("me", "@room")
        stored = await storage.get_last_read("me", "@room")
        return missing, first, second, stored

    missing, first, second, stored = asyncio.run(scenario())

    assert missing is None
    assert first == start
    assert second == start + timedelta(seconds=30)
    assert stored == second
    # The upsert only touches last_read.
    assert storage.get_first_read("me", "@room") == first


def test_records_are_keyed_by_user_and_room(tmp_path) -> None:
    storage = SQLiteReadStateStorage(str(tmp_path / "reads.db"))
    storage.init_db()

    async def scenario() -> tuple:
        await storage.mark_read("me", "@room")
        return await storage.get_last_read("me", "@other"), await storage.get_last_read("you", "@room")

    assert asyncio.run(scenario()) == (None, None)
    assert storage.get_first_read("you", "@room") is None
