"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BATCH_SIZE = 20
DEFAULT_MAX_JUMP_ATTEMPTS = 10


@dataclass(frozen=True)
class PaginationConfig:
    """Page size and bounds for backward loading."""

    batch_size: int = DEFAULT_BATCH_SIZE
    max_jump_attempts: int = DEFAULT_MAX_JUMP_ATTEMPTS
    # Rows from the top of the viewport that count as "near the top".
    load_more_threshold: int = 3

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_jump_attempts < 1:
            raise ValueError(f"max_jump_attempts must be positive, got {self.max_jump_attempts}")
        if self.load_more_threshold < 0:
            raise ValueError(f"load_more_threshold must not be negative, got {self.load_more_threshold}")


@dataclass(frozen=True)
class SearchConfig:
    """Markers wrapped around every highlighted occurrence."""

    highlight_open: str = "<mark>"
    highlight_close: str = "</mark>"


@dataclass(frozen=True)
class ReadStateConfig:
    """Read-state behaviour for live updates."""

    auto_mark_read: bool = True
