"""Coordinator for one open room.

ChatWindow owns the store, index, loader, search engine, jump resolver and
read tracker for a single session, and routes UI events (scroll, search
input, selection, focus) and live-feed events into them. It is the only
place that wires the components together.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from scrollback.core.config import PaginationConfig, ReadStateConfig, SearchConfig
from scrollback.core.jump import JumpResolver
from scrollback.core.message_store import MessageStore
from scrollback.core.models import ChangeEvent, ChangeKind, ChatSession, Message, RenderMode, SearchResult
from scrollback.core.page_loader import PageLoader
from scrollback.core.ports import LogSourcePort, ReadStatePort, RenderPort, Subscription
from scrollback.core.read_tracker import ReadTracker
from scrollback.core.search import SearchEngine
from scrollback.core.search_index import InvertedIndex

LOGGER = logging.getLogger(__name__)


class ChatWindow:
    """Paginated, searchable view over one room of the remote log."""

    def __init__(
        self,
        session: ChatSession,
        source: LogSourcePort,
        read_state: ReadStatePort,
        renderer: Optional[RenderPort] = None,
        pagination: Optional[PaginationConfig] = None,
        search_config: Optional[SearchConfig] = None,
        read_config: Optional[ReadStateConfig] = None,
    ) -> None:
        self.session = session
        self._source = source
        self._renderer = renderer
        self._pagination = pagination or PaginationConfig()
        self._read_config = read_config or ReadStateConfig()

        self.store = MessageStore()
        self.index = InvertedIndex()
        self.loader = PageLoader(source, session, self.store, self.index, self._pagination, renderer)
        self.search_engine = SearchEngine(self.store, self.index, search_config)
        self.jumper = JumpResolver(
            self.store,
            self.loader,
            self._pagination.max_jump_attempts,
            renderer=renderer,
            search=self.search_engine,
        )
        self.reads = ReadTracker(self.store, read_state, session)

        self.active = True
        self._subscription: Optional[Subscription] = None

    @property
    def unread_count(self) -> int:
        return self.reads.unread_count

    async def open(self) -> list[Message]:
        """Load the newest page, then refresh the unread counter."""

        batch = await self.loader.load_initial()
        await self.reads.compute_unread()
        return batch

    def follow(self) -> None:
        """Start receiving live additions; a second call is a no-op."""

        if self._subscription is not None:
            return
        self._subscription = self._source.subscribe(self.session.room_id, self.handle_change)
        LOGGER.info("Following live updates for %s", self.session.room_id)

    def close(self) -> None:
        if self._subscription is None:
            return
        self._subscription.cancel()
        self._subscription = None

    async def on_scroll(self, scroll_top: int) -> list[Message]:
        """Load an older page when the viewport is near the top."""

        if scroll_top >= self._pagination.load_more_threshold:
            return []
        if self.loader.loading or self.loader.exhausted:
            return []
        return await self.loader.load_more()

    async def handle_change(self, event: ChangeEvent) -> bool:
        """Apply one live-feed event; returns True when a message was appended.

        Only additions belong to this window. Edits and removals are ignored.
        """

        if event.kind is not ChangeKind.ADDED:
            return False
        message = event.message
        if not self.store.append_live(message):
            return False
        self.index.add([message])
        if self._renderer is not None:
            self._renderer.render_batch([message], RenderMode.APPEND)
        if self._should_auto_mark(message):
            await self.reads.mark_read()
        return True

    def _should_auto_mark(self, message: Message) -> bool:
        return (
            self._read_config.auto_mark_read
            and self.active
            and message.sender_id != self.session.user_id
        )

    def search(self, query: str) -> list[SearchResult]:
        return self.search_engine.search(query)

    def clear_search(self) -> None:
        self.search_engine.clear()

    async def jump_to(self, message_id: str) -> bool:
        return await self.jumper.resolve(message_id)

    async def compute_unread(self) -> int:
        return await self.reads.compute_unread()

    async def mark_read(self) -> Optional[datetime]:
        return await self.reads.mark_read()

    async def set_active(self, active: bool) -> None:
        """Track focus; regaining it marks the room read."""

        was_active = self.active
        self.active = active
        if active and not was_active:
            await self.reads.mark_read()
