"""Console transcript view.

Implements the core RenderPort as a fixed-size viewport over a list of text
rows, drawn with rich. Rows are rebuilt from the rendered messages on every
batch; the viewport is re-anchored so that a prepend never moves the message
the reader was looking at.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Optional, Sequence

from rich.console import Console
from rich.text import Text

from scrollback.core.config import SearchConfig
from scrollback.core.models import Message, RenderMode, SearchResult

DATE_FORMAT = "%a %b %d %Y"
TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class _Row:
    text: str
    message_id: Optional[str] = None
    separator: bool = False


def highlighted_text(value: str, config: SearchConfig, style: str = "black on yellow") -> Text:
    """Convert marker-wrapped text from the search engine into styled rich Text."""

    text = Text()
    remaining = value
    while remaining:
        start = remaining.find(config.highlight_open)
        if start < 0:
            text.append(remaining)
            break
        end = remaining.find(config.highlight_close, start + len(config.highlight_open))
        if end < 0:
            text.append(remaining)
            break
        text.append(remaining[:start])
        text.append(remaining[start + len(config.highlight_open):end], style=style)
        remaining = remaining[end + len(config.highlight_close):]
    return text


class ConsoleTranscriptView:
    """RenderPort adapter with scroll anchoring and date separators."""

    def __init__(
        self,
        console: Optional[Console] = None,
        width: int = 80,
        height: int = 20,
        stick_to_bottom_rows: int = 3,
        current_user_id: Optional[str] = None,
        echo_appends: bool = False,
    ) -> None:
        self._console = console or Console()
        self._width = width
        self._height = height
        self._stick_rows = stick_to_bottom_rows
        self._current_user_id = current_user_id
        # Live tailing prints each appended message instead of redrawing.
        self._echo_appends = echo_appends
        self._messages: list[Message] = []
        self._rows: list[_Row] = []
        self._scroll_top = 0
        self.highlighted: set[str] = set()

    @property
    def scroll_top(self) -> int:
        return self._scroll_top

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def max_scroll(self) -> int:
        return max(0, len(self._rows) - self._height)

    def scroll_to(self, top: int) -> None:
        self._scroll_top = min(max(0, top), self.max_scroll)

    def render_batch(self, messages: Sequence[Message], mode: RenderMode) -> None:
        if not messages:
            return
        if mode is RenderMode.PREPEND:
            self._prepend(messages)
        else:
            self._append(messages)

    def _prepend(self, messages: Sequence[Message]) -> None:
        if not self._rows:
            self._messages = list(messages)
            self._rebuild()
            self.scroll_to(self.max_scroll)
            return

        anchor = self._top_visible_message()
        old_rows = len(self._rows)
        self._messages[:0] = messages
        self._rebuild()
        if anchor is None:
            self.scroll_to(self._scroll_top + len(self._rows) - old_rows)
            return
        anchor_id, offset = anchor
        self.scroll_to(self._first_row(anchor_id) - offset)

    def _append(self, messages: Sequence[Message]) -> None:
        at_bottom = self.max_scroll - self._scroll_top <= self._stick_rows
        self._messages.extend(messages)
        self._rebuild()
        if at_bottom:
            self.scroll_to(self.max_scroll)
        if self._echo_appends:
            for message in messages:
                self._print_rows(self._message_rows(message))

    def scroll_to_message(self, message_id: str) -> None:
        row = self._first_row(message_id)
        if row < 0:
            return
        self.scroll_to(row - self._height // 2)

    def highlight_message(self, message_id: str) -> None:
        self.highlighted.add(message_id)

    def clear_highlights(self) -> None:
        self.highlighted.clear()

    def visible_message_ids(self) -> list[str]:
        ids: list[str] = []
        for row in self._rows[self._scroll_top:self._scroll_top + self._height]:
            if row.message_id is not None and row.message_id not in ids:
                ids.append(row.message_id)
        return ids

    def offset_in_viewport(self, message_id: str) -> Optional[int]:
        """Row offset of the message's first row from the viewport top."""

        row = self._first_row(message_id)
        if row < 0:
            return None
        return row - self._scroll_top

    def _top_visible_message(self) -> Optional[tuple[str, int]]:
        for index in range(self._scroll_top, min(len(self._rows), self._scroll_top + self._height)):
            message_id = self._rows[index].message_id
            if message_id is not None:
                first = self._first_row(message_id)
                return message_id, first - self._scroll_top
        return None

    def _first_row(self, message_id: str) -> int:
        for index, row in enumerate(self._rows):
            if row.message_id == message_id:
                return index
        return -1

    def _rebuild(self) -> None:
        rows: list[_Row] = []
        last_date = None
        for message in self._messages:
            message_date = message.timestamp.date()
            if message_date != last_date:
                rows.append(_Row(text=message.timestamp.strftime(DATE_FORMAT), separator=True))
                last_date = message_date
            rows.extend(self._message_rows(message))
        self._rows = rows

    def _message_rows(self, message: Message) -> list[_Row]:
        rows: list[_Row] = []
        if message.image_url:
            rows.append(_Row(text=f"[image] {message.image_url}", message_id=message.id))
        suffix = f"  {message.timestamp.strftime(TIME_FORMAT)}"
        lines = textwrap.wrap(message.text, width=max(1, self._width - len(suffix))) if message.text else []
        if not lines and not rows:
            lines = [""]
        if lines:
            lines[-1] = f"{lines[-1]}{suffix}"
        else:
            rows[-1] = _Row(text=f"{rows[-1].text}{suffix}", message_id=message.id)
        rows.extend(_Row(text=line, message_id=message.id) for line in lines)
        return rows

    def draw(self) -> None:
        """Print the current viewport."""

        self._print_rows(self._rows[self._scroll_top:self._scroll_top + self._height])

    def _print_rows(self, rows: Sequence[_Row]) -> None:
        for row in rows:
            if row.separator:
                self._console.rule(row.text, style="dim")
                continue
            style = ""
            if row.message_id in self.highlighted:
                style = "bold reverse"
            line = Text(row.text, style=style)
            if self._current_user_id is not None and self._sender_of(row.message_id) == self._current_user_id:
                line.justify = "right"
            self._console.print(line)

    def draw_results(self, results: Sequence[SearchResult], config: SearchConfig) -> None:
        if not results:
            self._console.print("No messages found", style="dim")
            return
        for result in results:
            message = result.message
            stamp = message.timestamp.strftime(f"{DATE_FORMAT} {TIME_FORMAT}")
            line = Text(f"[{message.id}] ", style="dim")
            line.append(highlighted_text(result.highlighted_text, config))
            line.append(f"  {message.sender_id} {stamp}", style="dim")
            self._console.print(line)

    def _sender_of(self, message_id: Optional[str]) -> Optional[str]:
        for message in self._messages:
            if message.id == message_id:
                return message.sender_id
        return None
