"""Incremental inverted index over loaded message text."""

from __future__ import annotations

from typing import Iterable

from scrollback.core.models import Message


def tokenize(text: str) -> list[str]:
    """Lower-case whitespace tokens, empty ones dropped."""

    return [token for token in text.lower().split() if token]


class InvertedIndex:
    """Maps tokens to the ids of messages containing them.

    The index only grows. A message is indexed once, the first time it is
    added; it is discarded with the session rather than pruned.
    """

    def __init__(self) -> None:
        self._postings: dict[str, set[str]] = {}
        self._indexed: set[str] = set()

    def __len__(self) -> int:
        return len(self._postings)

    def __contains__(self, token: object) -> bool:
        return token in self._postings

    def add(self, messages: Iterable[Message]) -> int:
        """Index every not-yet-indexed message; returns how many were indexed."""

        count = 0
        for message in messages:
            if message.id in self._indexed:
                continue
            self._indexed.add(message.id)
            count += 1
            if not message.text:
                continue
            for token in tokenize(message.text):
                self._postings.setdefault(token, set()).add(message.id)
        return count

    def ids_matching(self, fragment: str) -> set[str]:
        """Return ids under every token that contains ``fragment``.

        This walks all keys, so it costs O(tokens) rather than a lookup.
        """

        matched: set[str] = set()
        for token, ids in self._postings.items():
            if fragment in token:
                matched.update(ids)
        return matched
