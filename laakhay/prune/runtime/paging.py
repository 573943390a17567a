"""Cursor-based pagination over a ListingClient.

The pager turns repeated ``list_path`` calls into a lazy, ordered sequence
of one path's child keys. Each page resumes strictly after the last key of
the previous page; a page shorter than ``page_size`` ends the sequence.

The cursor only advances after a page is received, so a failed page can be
re-issued from the last observed key. Duplicate work on retry is bounded to
that single page.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from ..core.base import ListingClient
from ..core.exceptions import StoreError
from .telemetry import log_page_fetched


class CursorPager:
    """Restartable pager over one path's children.

    Examples:
        pager = CursorPager(store, "/users", page_size=500)
        async for key in pager:
            ...
    """

    def __init__(
        self,
        client: ListingClient,
        path: str,
        *,
        page_size: int,
        timeout: float | None = None,
        start_after: str | None = None,
    ) -> None:
        """Initialize pager.

        Args:
            client: Listing client to page through
            path: Path whose direct children are listed
            page_size: Keys requested per page (``num_children``)
            timeout: Per-page deadline passed to the client
            start_after: Resume after this key instead of from the beginning
        """
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._client = client
        self._path = path
        self._page_size = page_size
        self._timeout = timeout
        self._cursor = start_after
        self._exhausted = False
        self._pages_fetched = 0
        self._keys_seen = 0

    @property
    def path(self) -> str:
        return self._path

    @property
    def cursor(self) -> str | None:
        """Last key observed; the next page starts strictly after it."""
        return self._cursor

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    @property
    def keys_seen(self) -> int:
        return self._keys_seen

    async def fetch_next_page(self) -> list[str]:
        """Fetch the page after the current cursor.

        Returns an empty list once the sequence is exhausted. If the client
        raises, the cursor is left untouched so the same page can be retried.

        Raises:
            StoreError: If the client returns keys out of order or not after the cursor
        """
        if self._exhausted:
            return []

        start_after = self._cursor
        keys = list(
            await self._client.list_path(
                self._path,
                self._page_size,
                start_after=start_after,
                timeout=self._timeout,
            )
        )
        self._validate_page(keys, start_after)

        log_page_fetched(
            path=self._path,
            page_index=self._pages_fetched,
            keys=len(keys),
            start_after=start_after,
        )
        self._pages_fetched += 1
        self._keys_seen += len(keys)
        if keys:
            self._cursor = keys[-1]
        if len(keys) < self._page_size:
            self._exhausted = True
        return keys

    async def pages(self) -> AsyncIterator[list[str]]:
        """Yield non-empty pages until exhaustion."""
        while not self._exhausted:
            page = await self.fetch_next_page()
            if page:
                yield page

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iter_keys()

    async def _iter_keys(self) -> AsyncIterator[str]:
        async for page in self.pages():
            for key in page:
                yield key

    def _validate_page(self, keys: list[str], start_after: str | None) -> None:
        if len(keys) > self._page_size:
            raise StoreError(
                f"Listing of {self._path} returned {len(keys)} keys, more than {self._page_size}",
                path=self._path,
            )
        previous = start_after
        for key in keys:
            if previous is not None and key <= previous:
                raise StoreError(
                    f"Listing of {self._path} returned key {key!r} not after {previous!r}",
                    path=self._path,
                )
            previous = key
