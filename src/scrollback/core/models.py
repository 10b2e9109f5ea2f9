"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Message:
    """A single immutable record from the remote message log."""

    id: str
    sender_id: str
    text: str
    timestamp: datetime
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Cursor:
    """Opaque marker for the oldest loaded message.

    Log sources treat it as an exclusive start: the next page contains only
    messages strictly older than the one it was built from.
    """

    message_id: str
    timestamp: datetime

    @classmethod
    def from_message(cls, message: Message) -> "Cursor":
        return cls(message_id=message.id, timestamp=message.timestamp)


@dataclass(frozen=True)
class ChatSession:
    """Identity for one open room, owned by the composition root."""

    user_id: str
    room_id: str


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """One entry from a live change feed."""

    kind: ChangeKind
    message: Message


class RenderMode(str, Enum):
    PREPEND = "prepend"
    APPEND = "append"


@dataclass(frozen=True)
class SearchResult:
    """A matched message plus its highlighted text; recomputed per query."""

    message: Message
    highlighted_text: str


class JumpOutcome(str, Enum):
    """Terminal states of a jump. Never raised, only reported."""

    FOUND = "found"
    EXHAUSTED = "exhausted"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"
