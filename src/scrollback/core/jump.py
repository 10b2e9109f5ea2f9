"""Jump-to-message resolution with bounded backward loading."""

from __future__ import annotations

import logging
from typing import Optional

from scrollback.core.message_store import MessageStore
from scrollback.core.models import JumpOutcome
from scrollback.core.page_loader import PageLoader
from scrollback.core.ports import RenderPort
from scrollback.core.search import SearchEngine

LOGGER = logging.getLogger(__name__)


class JumpResolver:
    """Drives the page loader until a target id is loaded or the bound is hit.

    Each load counts as one attempt, including loads that failed or were
    suppressed because another request was already in flight.
    """

    def __init__(
        self,
        store: MessageStore,
        loader: PageLoader,
        max_attempts: int,
        renderer: Optional[RenderPort] = None,
        search: Optional[SearchEngine] = None,
    ) -> None:
        self._store = store
        self._loader = loader
        self._max_attempts = max_attempts
        self._renderer = renderer
        self._search = search
        self.last_outcome: Optional[JumpOutcome] = None

    async def resolve(self, target_id: str) -> bool:
        outcome = await self._locate(target_id)
        self.last_outcome = outcome
        LOGGER.info("Jump to %s: %s", target_id, outcome.value)
        if outcome is not JumpOutcome.FOUND:
            return False

        if self._renderer is not None:
            self._renderer.scroll_to_message(target_id)
            self._renderer.highlight_message(target_id)
        if self._search is not None:
            self._search.clear()
        return True

    async def _locate(self, target_id: str) -> JumpOutcome:
        if target_id in self._store:
            return JumpOutcome.FOUND

        for _ in range(self._max_attempts):
            if self._loader.exhausted:
                return JumpOutcome.EXHAUSTED
            await self._loader.load_more()
            if target_id in self._store:
                return JumpOutcome.FOUND

        if self._loader.exhausted:
            return JumpOutcome.EXHAUSTED
        return JumpOutcome.ATTEMPTS_EXCEEDED
