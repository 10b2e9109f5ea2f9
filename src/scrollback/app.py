"""Application entry point for scrollback."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Any, Awaitable, Callable, Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console

from scrollback.adapters.console_view import ConsoleTranscriptView
from scrollback.adapters.sqlite_storage import SQLiteReadStateStorage
from scrollback.adapters.telegram_source import TelegramLogSource
from scrollback.client import build_client
from scrollback.core.errors import ScrollbackError
from scrollback.core.models import ChatSession
from scrollback.core.window import ChatWindow
from scrollback.settings import PROJECT_ROOT, Settings, load_settings

NAME = "SCROLLBACK"
FONT = "small"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    """Masks configured secret values in every formatted record."""

    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {})
    if not redact_cfg.get("enabled", False):
        return []
    values = {os.getenv(name) for name in redact_cfg.get("patterns", ["API_HASH"])}
    # Longest first so a secret containing another is masked whole.
    return sorted((value for value in values if value), key=len, reverse=True)


def configure_logging(config: dict) -> None:
    if not config.get("enabled", False):
        return

    load_dotenv()
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = _RedactingFormatter(
        _redaction_values(config),
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/scrollback.log")
        if not os.path.isabs(path):
            path = os.path.join(PROJECT_ROOT, path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
                backupCount=int(file_cfg.get("backup_count", 5)),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    if handlers:
        logging.basicConfig(level=level, handlers=handlers)


@dataclass
class _Context:
    """Everything a CLI command needs, built once per run."""

    client: Any
    window: ChatWindow
    view: ConsoleTranscriptView
    settings: Settings


Command = Callable[[_Context], Awaitable[None]]


async def _with_window(settings: Settings, room_id: str, command: Command, echo_appends: bool = False) -> None:
    """Connect, build the window for ``room_id``, open it and run ``command``."""

    client = build_client()
    await client.connect()
    try:
        if not await client.is_user_authorized():
            raise RuntimeError("Telegram session is not authorized; sign in with Telethon first")
        me = await client.get_me()
        session = ChatSession(user_id=str(me.id), room_id=room_id)

        storage = SQLiteReadStateStorage(settings.db_path)
        storage.init_db()
        view = ConsoleTranscriptView(
            console=Console(width=settings.view.width),
            width=settings.view.width,
            height=settings.view.height,
            stick_to_bottom_rows=settings.view.stick_to_bottom_rows,
            current_user_id=session.user_id,
            echo_appends=echo_appends,
        )
        window = ChatWindow(
            session,
            TelegramLogSource(client),
            storage,
            renderer=view,
            pagination=settings.pagination,
            search_config=settings.search,
            read_config=settings.read_state,
        )
        await window.open()
        try:
            await command(_Context(client=client, window=window, view=view, settings=settings))
        finally:
            window.close()
    finally:
        await client.disconnect()


async def _scroll_back(ctx: _Context, pages: int) -> None:
    # Emulates the reader scrolling to the top once per extra page.
    for _ in range(max(0, pages - 1)):
        ctx.view.scroll_to(0)
        if not await ctx.window.on_scroll(ctx.view.scroll_top):
            break


def _browse(pages: int) -> Command:
    async def run(ctx: _Context) -> None:
        await _scroll_back(ctx, pages)
        ctx.view.scroll_to(ctx.view.max_scroll)
        ctx.view.draw()
        print(f"{len(ctx.window.store)} messages loaded, {ctx.window.unread_count} unread")

    return run


def _search(query: str, pages: int) -> Command:
    async def run(ctx: _Context) -> None:
        await _scroll_back(ctx, pages)
        results = ctx.window.search(query)
        ctx.view.draw_results(results, ctx.settings.search)
        print(f"{len(results)} match(es) in {len(ctx.window.store)} loaded messages")

    return run


def _jump(message_id: str) -> Command:
    async def run(ctx: _Context) -> None:
        if await ctx.window.jump_to(message_id):
            ctx.view.draw()
            return
        outcome = ctx.window.jumper.last_outcome
        print(f"Message {message_id} not found ({outcome.value if outcome else 'unknown'})")

    return run


async def _unread(ctx: _Context) -> None:
    print(f"{ctx.window.unread_count} unread in {len(ctx.window.store)} loaded messages")


async def _mark_read(ctx: _Context) -> None:
    if await ctx.window.mark_read() is None:
        print(f"Could not mark {ctx.window.session.room_id} as read")
        return
    print(f"Marked {ctx.window.session.room_id} as read")


async def _follow(ctx: _Context) -> None:
    ctx.view.draw()
    ctx.window.follow()
    LOGGER.info("Listening for new messages in %s...", ctx.window.session.room_id)
    await ctx.client.run_until_disconnected()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="scrollback")
    parser.add_argument("--config", help="Path to config.json")
    subparsers = parser.add_subparsers(dest="command", required=True)

    browse = subparsers.add_parser("browse", help="Show the newest messages of a room")
    browse.add_argument("room", help="@username or chat_id:<id>")
    browse.add_argument("--pages", type=int, default=1, help="Pages to load")

    search = subparsers.add_parser("search", help="Search loaded messages")
    search.add_argument("room")
    search.add_argument("query")
    search.add_argument("--pages", type=int, default=5, help="Pages to load before searching")

    jump = subparsers.add_parser("jump", help="Load history until a message is found")
    jump.add_argument("room")
    jump.add_argument("message_id")

    unread = subparsers.add_parser("unread", help="Count unread messages in the newest page")
    unread.add_argument("room")

    mark = subparsers.add_parser("mark-read", help="Mark a room as read now")
    mark.add_argument("room")

    follow = subparsers.add_parser("follow", help="Tail new messages until disconnected")
    follow.add_argument("room")

    args = parser.parse_args(argv)

    _print_banner()
    settings = load_settings(args.config)
    configure_logging(settings.logging)

    commands: dict[str, Command] = {
        "unread": _unread,
        "mark-read": _mark_read,
        "follow": _follow,
    }
    if args.command == "browse":
        command = _browse(args.pages)
    elif args.command == "search":
        command = _search(args.query, args.pages)
    elif args.command == "jump":
        command = _jump(args.message_id)
    else:
        command = commands[args.command]

    try:
        asyncio.run(_with_window(settings, args.room, command, echo_appends=args.command == "follow"))
    except ScrollbackError as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        parser.exit(1, f"scrollback: {exc}\n")


if __name__ == "__main__":
    main()
