"""Unread bookkeeping against a remote per (user, room) last-read record."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from scrollback.core.errors import TransientFetchError
from scrollback.core.message_store import MessageStore
from scrollback.core.models import ChatSession
from scrollback.core.ports import ReadStatePort

LOGGER = logging.getLogger(__name__)


def count_unread(store: MessageStore, user_id: str, last_read: Optional[datetime]) -> int:
    """Count messages from other senders strictly after ``last_read``.

    With no last-read record every message from another sender is unread.
    """

    return sum(
        1
        for message in store
        if message.sender_id != user_id and (last_read is None or message.timestamp > last_read)
    )


class ReadTracker:
    """Computes and resets the unread counter for the current session."""

    def __init__(self, store: MessageStore, read_state: ReadStatePort, session: ChatSession) -> None:
        self._store = store
        self._read_state = read_state
        self._session = session
        self.unread_count = 0

    async def compute_unread(self) -> int:
        """Recount unread messages in the window.

        On a failed read-state fetch the previous count is kept and returned.
        """

        try:
            last_read = await self._read_state.get_last_read(self._session.user_id, self._session.room_id)
        except TransientFetchError:
            LOGGER.exception("Failed to fetch read state for %s", self._session.room_id)
            return self.unread_count

        self.unread_count = count_unread(self._store, self._session.user_id, last_read)
        return self.unread_count

    async def mark_read(self) -> Optional[datetime]:
        """Stamp the room as read now; returns the stored instant or None on failure."""

        try:
            stamped = await self._read_state.mark_read(self._session.user_id, self._session.room_id)
        except TransientFetchError:
            LOGGER.exception("Failed to mark %s as read", self._session.room_id)
            return None

        self.unread_count = 0
        LOGGER.info("Marked %s read at %s", self._session.room_id, stamped.isoformat())
        return stamped
