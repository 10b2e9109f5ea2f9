from __future__ import annotations

from scrollback.core.search_index import InvertedIndex, tokenize
from tests.fakes import make_message


def test_tokenize_lowercases_and_splits_on_whitespace() -> None:
    assert tokenize("  Hello   WORLD\tagain\n") == ["hello", "world", "again"]
    assert tokenize("   ") == []


def test_add_indexes_each_message_once() -> None:
    index = InvertedIndex()
    first = make_message(1, text="Hello world")
    second = make_message(2, text="goodbye world")

    assert index.add([first, second]) == 2
    assert index.add([first]) == 0

    assert index.ids_matching("world") == {"m1", "m2"}
    assert index.ids_matching("hello") == {"m1"}
    assert "Hello" not in index


def test_ids_matching_uses_substring_of_tokens() -> None:
    index = InvertedIndex()
    index.add([make_message(1, text="hello world"), make_message(2, text="shell script")])

    assert index.ids_matching("ell") == {"m1", "m2"}
    assert index.ids_matching("world") == {"m1"}
    assert index.ids_matching("hello world") == set()


def test_messages_without_text_are_tracked_but_not_tokenized() -> None:
    index = InvertedIndex()
    assert index.add([make_message(1, text="")]) == 1
    assert len(index) == 0
