"""Static configuration for scrollback.

All user-editable settings (pagination, search markers, read-state, view,
storage, logging) live in a single JSON file for quick edits without touching
Python. Every key is optional; a missing file means all defaults.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from scrollback.core.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_JUMP_ATTEMPTS,
    PaginationConfig,
    ReadStateConfig,
    SearchConfig,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# Where to store the SQLite read-state database unless config says otherwise.
DEFAULT_DB_PATH = os.path.join(PROJECT_ROOT, "scrollback.db")

# Overridable from the CLI (--config) or the environment.
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")
CONFIG_ENV_VAR = "SCROLLBACK_CONFIG"


@dataclass(frozen=True)
class ViewSettings:
    """Console viewport dimensions."""

    width: int = 80
    height: int = 20
    stick_to_bottom_rows: int = 3


@dataclass(frozen=True)
class Settings:
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    read_state: ReadStateConfig = field(default_factory=ReadStateConfig)
    view: ViewSettings = field(default_factory=ViewSettings)
    db_path: str = DEFAULT_DB_PATH
    logging: dict[str, Any] = field(default_factory=dict)


def resolve_config_path(path: Optional[str] = None) -> str:
    return path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def _load_json_config(path: str) -> dict:
    """Load the JSON config with a flat, user-friendly schema."""

    if not os.path.exists(path):
        return {}

    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object: {path}")
    return data


def _section(config: dict, name: str) -> dict:
    value = config.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be an object")
    return value


def _int(section: dict, key: str, default: int, minimum: int = 0) -> int:
    raw = section.get(key, default)
    # bool is an int subclass; "true" is never a sensible size.
    if isinstance(raw, bool):
        raise ValueError(f"Config key '{key}' must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config key '{key}' must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"Config key '{key}' must be >= {minimum}, got {value}")
    return value


def _bool(section: dict, key: str, default: bool) -> bool:
    raw = section.get(key, default)
    if not isinstance(raw, bool):
        raise ValueError(f"Config key '{key}' must be true or false, got {raw!r}")
    return raw


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from the JSON config, falling back to defaults."""

    config_path = resolve_config_path(path)
    raw = _load_json_config(config_path)

    pagination = _section(raw, "pagination")
    search = _section(raw, "search")
    read_state = _section(raw, "read_state")
    view = _section(raw, "view")
    storage = _section(raw, "storage")

    # Markers wrap every highlighted occurrence in search results.
    defaults = SearchConfig()
    highlight_open = str(search.get("highlight_open", defaults.highlight_open))
    highlight_close = str(search.get("highlight_close", defaults.highlight_close))
    if not highlight_open or not highlight_close:
        raise ValueError("Highlight markers must not be empty")

    db_path = storage.get("db_path") or DEFAULT_DB_PATH
    if not os.path.isabs(db_path):
        db_path = os.path.join(PROJECT_ROOT, db_path)

    return Settings(
        pagination=PaginationConfig(
            batch_size=_int(pagination, "batch_size", DEFAULT_BATCH_SIZE, minimum=1),
            max_jump_attempts=_int(pagination, "max_jump_attempts", DEFAULT_MAX_JUMP_ATTEMPTS, minimum=1),
            load_more_threshold=_int(pagination, "load_more_threshold", 3),
        ),
        search=SearchConfig(highlight_open=highlight_open, highlight_close=highlight_close),
        read_state=ReadStateConfig(auto_mark_read=_bool(read_state, "auto_mark_read", True)),
        view=ViewSettings(
            width=_int(view, "width", 80, minimum=20),
            height=_int(view, "height", 20, minimum=1),
            stick_to_bottom_rows=_int(view, "stick_to_bottom_rows", 3),
        ),
        db_path=db_path,
        logging=_section(raw, "logging"),
    )
