"""Ordered, deduplicated in-memory window of loaded messages."""

from __future__ import annotations

import bisect
import logging
from typing import Iterable, Iterator, Optional

from scrollback.core.models import Message

LOGGER = logging.getLogger(__name__)


def _timestamp(message: Message):
    return message.timestamp


class MessageStore:
    """Oldest-first window, contiguous with the live tail.

    Ids are unique within the window and the sequence stays sorted ascending
    by timestamp after every insert. Nothing is ever evicted.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._by_id: dict[str, Message] = {}

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._by_id

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def lookup(self, message_id: str) -> Optional[Message]:
        return self._by_id.get(message_id)

    def merge(self, batch: Iterable[Message]) -> list[Message]:
        """Insert an older, ascending batch at the front of the window.

        Returns the messages that were actually new. Ids already present are
        skipped so an overlapping page can never introduce duplicates.
        """

        fresh: list[Message] = []
        for message in batch:
            if message.id in self._by_id:
                continue
            self._by_id[message.id] = message
            fresh.append(message)

        if not fresh:
            return fresh

        out_of_order = bool(self._messages) and fresh[-1].timestamp > self._messages[0].timestamp
        out_of_order = out_of_order or any(
            earlier.timestamp > later.timestamp for earlier, later in zip(fresh, fresh[1:])
        )
        self._messages[:0] = fresh
        if out_of_order:
            # Out-of-order page from the source; restore ascending order.
            LOGGER.warning("Merged batch was not strictly older than the window; re-sorting")
            self._messages.sort(key=_timestamp)
        return fresh

    def append_live(self, message: Message) -> bool:
        """Add one live-feed message at the tail; returns False for duplicates."""

        if message.id in self._by_id:
            return False
        self._by_id[message.id] = message
        if not self._messages or self._messages[-1].timestamp <= message.timestamp:
            self._messages.append(message)
        else:
            bisect.insort_right(self._messages, message, key=_timestamp)
        return True
