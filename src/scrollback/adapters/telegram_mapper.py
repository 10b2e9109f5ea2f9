"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core.
"""

from __future__ import annotations

from typing import Optional, Union

from telethon.tl.custom import Message as TelegramMessage
from telethon.tl.types import PeerChannel, PeerChat

from scrollback.core.models import Message

CHAT_ID_PREFIX = "chat_id:"


def parse_room_key(room_key: str) -> Union[str, int]:
    """Turn a room key into something Telethon can resolve.

    ``@name`` stays a username, ``chat_id:<id>`` becomes the integer peer id.
    """

    if room_key.startswith("@") and len(room_key) > 1:
        return room_key
    if room_key.startswith(CHAT_ID_PREFIX):
        raw = room_key[len(CHAT_ID_PREFIX):]
        try:
            return int(raw)
        except ValueError:
            pass
    raise ValueError(f"Unsupported room key: {room_key!r} (expected @username or chat_id:<id>)")


def build_permalink(message: TelegramMessage) -> Optional[str]:
    """Return a t.me link for the message when one can exist."""

    chat = getattr(message, "chat", None)
    username = getattr(chat, "username", None)
    # Prefer public usernames for permalinks when available.
    if isinstance(username, str) and username:
        return f"https://t.me/{username}/{message.id}"

    peer_id = getattr(message, "peer_id", None)
    if isinstance(peer_id, PeerChannel):
        return f"https://t.me/c/{peer_id.channel_id}/{message.id}"
    if isinstance(peer_id, PeerChat):
        return f"https://t.me/c/{peer_id.chat_id}/{message.id}"
    # PeerUser has no chat/channel id; no permalink is possible.
    return None


def to_core_message(message: TelegramMessage) -> Message:
    """Build a core Message from a Telethon Message."""

    sender_id = getattr(message, "sender_id", None)
    # Telegram photos have no direct URL; the permalink is the closest stable link.
    image_url = build_permalink(message) if getattr(message, "photo", None) else None
    return Message(
        id=str(message.id),
        sender_id=str(sender_id) if sender_id is not None else "",
        text=getattr(message, "raw_text", None) or "",
        timestamp=message.date,
        image_url=image_url,
    )
