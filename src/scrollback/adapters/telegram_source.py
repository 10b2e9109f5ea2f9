"""Telegram log source adapter.

Implements the core LogSourcePort on top of Telethon. Pages come from
``iter_messages`` (newest-first, ``offset_id`` exclusive), which lines up with
the cursor contract directly. The live feed is a pair of event handlers that
are removed again when the subscription is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from telethon import errors, events

from scrollback.adapters.telegram_mapper import parse_room_key, to_core_message
from scrollback.core.errors import RoomNotFoundError, TransientFetchError
from scrollback.core.models import ChangeEvent, ChangeKind, Cursor, Message

LOGGER = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (errors.RPCError, ConnectionError, asyncio.TimeoutError)

ChangeCallback = Callable[[ChangeEvent], Awaitable[object]]


class TelegramSubscription:
    """Cancellation handle for registered Telethon event handlers."""

    def __init__(self, client, handlers: list[tuple[Callable[..., Any], Any]]) -> None:
        self._client = client
        self._handlers = handlers

    @property
    def active(self) -> bool:
        return bool(self._handlers)

    def cancel(self) -> None:
        for callback, builder in self._handlers:
            self._client.remove_event_handler(callback, builder)
        self._handlers = []


class TelegramLogSource:
    """LogSourcePort backed by a connected Telethon client."""

    def __init__(self, client) -> None:
        self._client = client
        self._entities: dict[str, Any] = {}

    async def _resolve(self, room_id: str) -> Any:
        if room_id in self._entities:
            return self._entities[room_id]
        try:
            entity = await self._client.get_entity(parse_room_key(room_id))
        except _TRANSIENT_ERRORS as exc:
            raise TransientFetchError(f"Failed to resolve {room_id}") from exc
        except ValueError as exc:
            # Telethon raises ValueError for usernames and ids it cannot find.
            raise RoomNotFoundError(f"Cannot resolve room {room_id}") from exc
        self._entities[room_id] = entity
        return entity

    async def fetch_page(self, room_id: str, before: Optional[Cursor], limit: int) -> list[Message]:
        entity = await self._resolve(room_id)
        # offset_id=0 means "start from the newest message".
        offset_id = int(before.message_id) if before is not None else 0
        try:
            return [
                to_core_message(message)
                async for message in self._client.iter_messages(entity, limit=limit, offset_id=offset_id)
            ]
        except _TRANSIENT_ERRORS as exc:
            raise TransientFetchError(f"Failed to fetch page for {room_id}") from exc

    def subscribe(self, room_id: str, callback: ChangeCallback) -> TelegramSubscription:
        chats = parse_room_key(room_id)

        async def on_new(event) -> None:
            await callback(ChangeEvent(kind=ChangeKind.ADDED, message=to_core_message(event.message)))

        async def on_edit(event) -> None:
            await callback(ChangeEvent(kind=ChangeKind.MODIFIED, message=to_core_message(event.message)))

        handlers = [
            (on_new, events.NewMessage(chats=chats)),
            (on_edit, events.MessageEdited(chats=chats)),
        ]
        for handler, builder in handlers:
            self._client.add_event_handler(handler, builder)
        LOGGER.debug("Subscribed to %s", room_id)
        return TelegramSubscription(self._client, handlers)
