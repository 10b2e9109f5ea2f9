"""Telegram client factory for scrollback.

Authentication is out of scope here: the client reuses an existing Telethon
session file and the app refuses to run if that session is not authorized.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient


def build_client() -> TelegramClient:
    """Create a Telethon client from environment variables.

    API_ID/API_HASH are read via python-dotenv to keep secrets out of the repo.
    The session name defaults to "scrollback".
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "scrollback")

    # Fail fast on missing credentials to avoid an ambiguous login prompt.
    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")
    try:
        parsed_id = int(api_id)
    except ValueError as exc:
        raise RuntimeError(f"API_ID must be numeric, got {api_id!r}") from exc

    logging.getLogger(__name__).info("Initializing Telegram client (session=%s)", session_name)

    return TelegramClient(session_name, parsed_id, api_hash)
