from __future__ import annotations

from scrollback.core.config import SearchConfig
from scrollback.core.message_store import MessageStore
from scrollback.core.search import SearchEngine, highlight
from scrollback.core.search_index import InvertedIndex
from tests.fakes import make_message


def _engine(*texts: str) -> SearchEngine:
    store = MessageStore()
    index = InvertedIndex()
    messages = [make_message(number, text=text) for number, text in enumerate(texts)]
    store.merge(messages)
    index.add(messages)
    return SearchEngine(store, index)


def test_search_returns_all_matches_most_recent_first() -> None:
    engine = _engine("hello world", "goodbye world")

    results = engine.search("world")

    assert [result.message.id for result in results] == ["m1", "m0"]


def test_search_partial_word_matches_only_first() -> None:
    engine = _engine("hello world", "goodbye world")

    results = engine.search("hell")

    assert [result.message.id for result in results] == ["m0"]
    assert results[0].highlighted_text == "<mark>hell</mark>o world"


def test_fallback_scan_matches_across_tokens() -> None:
    engine = _engine("hello world", "photo wall", "goodbye world")

    results = engine.search("o w")

    assert [result.message.id for result in results] == ["m1", "m0"]


def test_empty_query_clears_results() -> None:
    engine = _engine("hello world")
    engine.search("world")
    assert engine.active

    assert engine.search("   ") == []
    assert engine.results == []
    assert not engine.active


def test_highlight_is_case_insensitive_and_keeps_original_case() -> None:
    engine = _engine("Hello WORLD")

    results = engine.search("world")

    assert results[0].highlighted_text == "Hello <mark>WORLD</mark>"


def test_highlight_wraps_every_occurrence() -> None:
    config = SearchConfig(highlight_open="[", highlight_close="]")
    assert highlight("la La lA", "la", config) == "[la] [La] [lA]"


def test_highlight_leaves_text_alone_for_invalid_pattern() -> None:
    assert highlight("a (b", "(b", SearchConfig()) == "a (b"


def test_results_are_deduplicated() -> None:
    engine = _engine("world world", "worldly")

    results = engine.search("world")

    assert [result.message.id for result in results] == ["m1", "m0"]
