"""Term search over the loaded window with highlighting.

Matching logic:
- Index pass: every token containing the query contributes its message ids.
- Fallback pass: every loaded message whose text contains the query, which
  catches phrases and fragments spanning token boundaries.
- Results are deduplicated by id and ordered most recent first.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from scrollback.core.config import SearchConfig
from scrollback.core.message_store import MessageStore
from scrollback.core.models import Message, SearchResult
from scrollback.core.search_index import InvertedIndex

LOGGER = logging.getLogger(__name__)


def highlight(text: str, query: str, config: SearchConfig) -> str:
    """Wrap every case-insensitive occurrence of ``query`` in the markers.

    The query is used as a pattern verbatim, without escaping. A query that
    is not a valid pattern leaves the text unhighlighted.
    """

    if not text:
        return ""
    try:
        pattern = re.compile(f"({query})", re.IGNORECASE)
    except re.error:
        LOGGER.debug("Query %r is not a valid highlight pattern", query)
        return text
    return pattern.sub(
        lambda found: f"{config.highlight_open}{found.group(1)}{config.highlight_close}",
        text,
    )


class SearchEngine:
    """Resolves free-text queries against the store and the index."""

    def __init__(
        self,
        store: MessageStore,
        index: InvertedIndex,
        config: Optional[SearchConfig] = None,
    ) -> None:
        self._store = store
        self._index = index
        self._config = config or SearchConfig()
        self._results: list[SearchResult] = []
        self._query = ""

    @property
    def results(self) -> list[SearchResult]:
        return list(self._results)

    @property
    def query(self) -> str:
        return self._query

    @property
    def active(self) -> bool:
        return bool(self._query)

    def clear(self) -> None:
        self._query = ""
        self._results = []

    def search(self, query: str) -> list[SearchResult]:
        if not query.strip():
            self.clear()
            return []

        term = query.lower()
        matched: list[Message] = []
        seen: set[str] = set()

        indexed_ids = self._index.ids_matching(term)
        for message in self._store:
            if message.id in indexed_ids:
                matched.append(message)
                seen.add(message.id)

        for message in self._store:
            if message.id in seen or not message.text:
                continue
            if term in message.text.lower():
                matched.append(message)
                seen.add(message.id)

        matched.sort(key=lambda message: message.timestamp, reverse=True)
        self._query = term
        self._results = [
            SearchResult(message=message, highlighted_text=highlight(message.text, term, self._config))
            for message in matched
        ]
        LOGGER.debug("Search %r matched %s of %s messages", term, len(self._results), len(self._store))
        return self.results
