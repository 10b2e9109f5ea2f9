"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the remote log, read-state storage
and rendering so that the core can be reused with different backends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from scrollback.core.models import ChangeEvent, Cursor, Message, RenderMode


class Subscription(Protocol):
    """Cancellation handle for a live change feed."""

    def cancel(self) -> None:
        ...


class LogSourcePort(Protocol):
    """Ordered, append-only remote message log.

    Implementations raise ``TransientFetchError`` on transport failures.
    """

    async def fetch_page(
        self, room_id: str, before: Optional[Cursor], limit: int
    ) -> list[Message]:
        """Return up to ``limit`` messages newest-first, strictly older than ``before``."""
        ...

    def subscribe(
        self, room_id: str, callback: Callable[[ChangeEvent], Awaitable[object]]
    ) -> Subscription:
        ...


class ReadStatePort(Protocol):
    """Per (user, room) last-read record stored remotely."""

    async def get_last_read(self, user_id: str, room_id: str) -> Optional[datetime]:
        ...

    async def mark_read(self, user_id: str, room_id: str) -> datetime:
        """Merge the store's current time into the record and return it."""
        ...


class RenderPort(Protocol):
    """Presentation side; the core never knows how these are drawn."""

    def render_batch(self, messages: Sequence[Message], mode: RenderMode) -> None:
        ...

    def scroll_to_message(self, message_id: str) -> None:
        ...

    def highlight_message(self, message_id: str) -> None:
        ...
