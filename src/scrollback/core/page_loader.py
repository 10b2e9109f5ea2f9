"""Cursor-based backward page loading from the remote log.

The loader enforces a strict order for every successful page:
1) Fetch newest-first from the log source, strictly older than the cursor
2) Reverse to ascending order and move the cursor to the oldest message
3) Merge into the message store (duplicates dropped)
4) Index the new messages
5) Prepend them on the render adapter

Concurrency control is two flags only: ``loading`` suppresses overlapping
requests and ``exhausted`` latches once the log reports no older data.
"""

from __future__ import annotations

import logging
from typing import Optional

from scrollback.core.config import PaginationConfig
from scrollback.core.errors import TransientFetchError
from scrollback.core.message_store import MessageStore
from scrollback.core.models import ChatSession, Cursor, Message, RenderMode
from scrollback.core.ports import LogSourcePort, RenderPort
from scrollback.core.search_index import InvertedIndex

LOGGER = logging.getLogger(__name__)


class PageLoader:
    """Loads older pages into the store and index, one request at a time."""

    def __init__(
        self,
        source: LogSourcePort,
        session: ChatSession,
        store: MessageStore,
        index: InvertedIndex,
        config: Optional[PaginationConfig] = None,
        renderer: Optional[RenderPort] = None,
    ) -> None:
        self._source = source
        self._session = session
        self._store = store
        self._index = index
        self._config = config or PaginationConfig()
        self._renderer = renderer
        self._cursor: Optional[Cursor] = None
        self._loading = False
        self._exhausted = False

    @property
    def cursor(self) -> Optional[Cursor]:
        return self._cursor

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    async def load_initial(self) -> list[Message]:
        """Load the newest page. Fail-soft: returns [] on a transient failure."""

        return await self._load(None)

    async def load_more(self) -> list[Message]:
        """Load the page just older than the cursor. Fail-soft."""

        return await self._load(self._cursor)

    async def _load(self, before: Optional[Cursor]) -> list[Message]:
        if self._exhausted or self._loading:
            return []

        room_id = self._session.room_id
        self._loading = True
        try:
            page = await self._source.fetch_page(room_id, before, self._config.batch_size)
        except TransientFetchError:
            LOGGER.exception("Failed to load messages for %s", room_id)
            return []
        finally:
            # Released on every path so a failed load never blocks the next one.
            self._loading = False

        if not page:
            self._exhausted = True
            LOGGER.info("History exhausted for %s", room_id)
            return []

        batch = list(reversed(page))
        oldest = Cursor.from_message(batch[0])
        if self._cursor is None or oldest.timestamp <= self._cursor.timestamp:
            self._cursor = oldest
        else:
            LOGGER.warning("Ignoring cursor %s newer than %s", oldest.message_id, self._cursor.message_id)

        fresh = self._store.merge(batch)
        self._index.add(fresh)
        if fresh and self._renderer is not None:
            self._renderer.render_batch(fresh, RenderMode.PREPEND)
        LOGGER.debug("Loaded %s messages for %s (%s new)", len(batch), room_id, len(fresh))
        return fresh
