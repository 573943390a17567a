"""Unit tests for CursorPager."""

from __future__ import annotations

import pytest

from laakhay.prune.core import StoreError, StoreTimeoutError
from laakhay.prune.runtime import CursorPager
from laakhay.prune.stores import InMemoryTreeStore


def _store(count: int) -> InMemoryTreeStore:
    return InMemoryTreeStore({f"k{i:03d}": 1 for i in range(count)})


class FlakyListing:
    """Listing client that fails selected calls with a timeout."""

    def __init__(self, inner: InMemoryTreeStore, fail_on: set[int]) -> None:
        self.inner = inner
        self.fail_on = fail_on
        self.calls: list[str | None] = []

    async def list_path(self, path, num_children, start_after=None, timeout=None):
        self.calls.append(start_after)
        if len(self.calls) in self.fail_on:
            raise StoreTimeoutError("timeout", path=path)
        return await self.inner.list_path(path, num_children, start_after, timeout)


class StaticListing:
    def __init__(self, pages: list[list[str]]) -> None:
        self.pages = pages

    async def list_path(self, path, num_children, start_after=None, timeout=None):
        return self.pages.pop(0)


@pytest.mark.asyncio
@pytest.mark.parametrize(("count", "page_size"), [(0, 3), (1, 3), (6, 3), (7, 3), (10, 1), (5, 100)])
async def test_visits_every_key_once_in_order(count, page_size):
    store = _store(count)
    pager = CursorPager(store, "/", page_size=page_size)

    keys = [key async for key in pager]

    assert keys == sorted(f"k{i:03d}" for i in range(count))
    assert pager.exhausted
    assert pager.keys_seen == count


@pytest.mark.asyncio
async def test_short_page_signals_exhaustion():
    store = _store(7)
    pager = CursorPager(store, "/", page_size=3)
    _ = [key async for key in pager]
    # 3 + 3 + 1: the short third page ends pagination without a fourth call.
    assert pager.pages_fetched == 3
    assert [call[2] for call in store.list_calls] == [None, "k002", "k005"]


@pytest.mark.asyncio
async def test_full_last_page_needs_one_empty_page():
    store = _store(4)
    pager = CursorPager(store, "/", page_size=2)
    pages = [page async for page in pager.pages()]
    assert pages == [["k000", "k001"], ["k002", "k003"]]
    assert pager.pages_fetched == 3


@pytest.mark.asyncio
async def test_failed_page_is_reissued_from_cursor():
    store = _store(5)
    listing = FlakyListing(store, fail_on={2})
    pager = CursorPager(listing, "/", page_size=2)

    assert await pager.fetch_next_page() == ["k000", "k001"]
    with pytest.raises(StoreTimeoutError):
        await pager.fetch_next_page()
    assert pager.cursor == "k001"

    assert await pager.fetch_next_page() == ["k002", "k003"]
    assert await pager.fetch_next_page() == ["k004"]
    assert listing.calls == [None, "k001", "k001", "k003"]


@pytest.mark.asyncio
async def test_resume_from_start_after():
    pager = CursorPager(_store(4), "/", page_size=10, start_after="k001")
    assert [key async for key in pager] == ["k002", "k003"]


@pytest.mark.asyncio
async def test_exhausted_pager_makes_no_calls():
    store = _store(1)
    pager = CursorPager(store, "/", page_size=5)
    await pager.fetch_next_page()
    assert await pager.fetch_next_page() == []
    assert len(store.list_calls) == 1


@pytest.mark.asyncio
async def test_passes_timeout_to_client():
    seen: list[float | None] = []

    class RecordingListing:
        async def list_path(self, path, num_children, start_after=None, timeout=None):
            seen.append(timeout)
            return []

    pager = CursorPager(RecordingListing(), "/", page_size=5, timeout=2.5)
    await pager.fetch_next_page()
    assert seen == [2.5]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "pages",
    [
        [["b", "a"]],
        [["a", "b"], ["b", "c"]],
        [["a", "b", "c"]],
    ],
)
async def test_rejects_misordered_or_oversized_pages(pages):
    pager = CursorPager(StaticListing(pages), "/", page_size=2)
    with pytest.raises(StoreError):
        _ = [key async for key in pager]


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        CursorPager(_store(1), "/", page_size=0)
