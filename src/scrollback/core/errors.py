"""Error taxonomy for the core.

Only ``TransientFetchError`` is handled fail-soft by the core. Exhaustion and
an unsuccessful jump are normal outcomes, not errors. ``RoomNotFoundError``
propagates: retrying cannot fix a room that does not exist.
"""

from __future__ import annotations


class ScrollbackError(Exception):
    """Base class for scrollback errors."""


class TransientFetchError(ScrollbackError):
    """A remote fetch or write failed; the operation yields no result."""


class RoomNotFoundError(ScrollbackError):
    """The room key is malformed or names no chat the source can reach."""
