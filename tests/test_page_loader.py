from __future__ import annotations

import asyncio

from scrollback.core.config import PaginationConfig
from scrollback.core.message_store import MessageStore
from scrollback.core.models import ChatSession, RenderMode
from scrollback.core.page_loader import PageLoader
from scrollback.core.search_index import InvertedIndex
from tests.fakes import FakeLogSource, FakeRenderer, make_log

SESSION = ChatSession(user_id="me", room_id="@room")


def _loader(source: FakeLogSource, batch_size: int = 5, renderer=None) -> tuple[PageLoader, MessageStore]:
    store = MessageStore()
    loader = PageLoader(
        source,
        SESSION,
        store,
        InvertedIndex(),
        PaginationConfig(batch_size=batch_size),
        renderer,
    )
    return loader, store


def test_load_initial_returns_newest_page_ascending() -> None:
    source = FakeLogSource(make_log(12))
    loader, store = _loader(source)

    batch = asyncio.run(loader.load_initial())

    assert [message.id for message in batch] == ["m7", "m8", "m9", "m10", "m11"]
    assert loader.cursor is not None and loader.cursor.message_id == "m7"
    assert source.requests == [("@room", None, 5)]
    assert len(store) == 5


def test_load_more_uses_exclusive_cursor() -> None:
    source = FakeLogSource(make_log(12))
    loader, _ = _loader(source)

    async def scenario():
        await loader.load_initial()
        return await loader.load_more()

    batch = asyncio.run(scenario())

    assert [message.id for message in batch] == ["m2", "m3", "m4", "m5", "m6"]
    assert source.requests[1][1].message_id == "m7"
    assert loader.cursor.message_id == "m2"


def test_full_history_has_no_duplicates_and_stays_sorted() -> None:
    log = make_log(23)
    source = FakeLogSource(log)
    loader, store = _loader(source)

    async def scenario() -> None:
        await loader.load_initial()
        for _ in range(8):
            await loader.load_more()
            timestamps = [message.timestamp for message in store]
            assert timestamps == sorted(timestamps)

    asyncio.run(scenario())

    ids = [message.id for message in store]
    assert len(ids) == len(set(ids)) == 23
    assert ids == [message.id for message in log]


def test_exhausted_flag_latches_without_more_requests() -> None:
    source = FakeLogSource(make_log(5))
    loader, _ = _loader(source)

    async def scenario() -> list:
        await loader.load_initial()
        first_empty = await loader.load_more()
        return [first_empty, await loader.load_more(), await loader.load_more()]

    batches = asyncio.run(scenario())

    assert batches == [[], [], []]
    assert loader.exhausted
    assert len(source.requests) == 2


def test_concurrent_load_more_issues_one_request() -> None:
    source = FakeLogSource(make_log(12))
    loader, _ = _loader(source)

    async def scenario() -> tuple:
        await loader.load_initial()
        source.gate = asyncio.Event()
        first = asyncio.ensure_future(loader.load_more())
        await asyncio.sleep(0)
        assert loader.loading
        second = await loader.load_more()
        source.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert len(source.requests) == 2
    assert len(first) == 5
    assert second == []
    assert not loader.loading


def test_transient_failure_releases_guard_and_keeps_cursor() -> None:
    source = FakeLogSource(make_log(12))
    loader, store = _loader(source)

    async def scenario() -> tuple:
        await loader.load_initial()
        source.fail_next = 1
        failed = await loader.load_more()
        retried = await loader.load_more()
        return failed, retried

    failed, retried = asyncio.run(scenario())

    assert failed == []
    assert not loader.exhausted
    assert not loader.loading
    assert [message.id for message in retried] == ["m2", "m3", "m4", "m5", "m6"]
    assert len(store) == 10


def test_failed_initial_load_leaves_loader_usable() -> None:
    source = FakeLogSource(make_log(3))
    source.fail_next = 1
    loader, _ = _loader(source)

    assert asyncio.run(loader.load_initial()) == []
    assert loader.cursor is None
    assert [message.id for message in asyncio.run(loader.load_initial())] == ["m0", "m1", "m2"]


def test_loaded_pages_are_prepended_on_renderer() -> None:
    source = FakeLogSource(make_log(8))
    renderer = FakeRenderer()
    loader, _ = _loader(source, batch_size=4, renderer=renderer)

    async def scenario() -> None:
        await loader.load_initial()
        await loader.load_more()
        await loader.load_more()

    asyncio.run(scenario())

    assert renderer.batches == [
        (["m4", "m5", "m6", "m7"], RenderMode.PREPEND),
        (["m0", "m1", "m2", "m3"], RenderMode.PREPEND),
    ]


def test_empty_initial_page_latches_exhausted() -> None:
    source = FakeLogSource([])
    loader, store = _loader(source)

    async def scenario() -> tuple:
        return await loader.load_initial(), await loader.load_more()

    first, second = asyncio.run(scenario())

    assert first == [] and second == []
    assert loader.exhausted
    assert loader.cursor is None
    assert len(store) == 0
    assert source.requests == [("@room", None, 5)]
