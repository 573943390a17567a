"""Concurrency token pool bounding in-flight store calls."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class ConcurrencyTokenPool:
    """K permits shared by every listing and delete call of a run.

    Tokens are only handed out through ``acquire()``, an async context
    manager that releases exactly once on exit, including when the wrapped
    call raises or is cancelled.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("Token pool size must be positive")
        self._size = size
        self._semaphore = asyncio.Semaphore(size)
        self._in_flight = 0
        self._peak = 0
        self._granted = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_flight(self) -> int:
        """Tokens currently held."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of tokens held at once."""
        return self._peak

    @property
    def granted(self) -> int:
        """Total tokens handed out over the pool's lifetime."""
        return self._granted

    @property
    def available(self) -> int:
        return self._size - self._in_flight

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """Hold one token for the duration of the block."""
        await self._semaphore.acquire()
        self._in_flight += 1
        self._granted += 1
        if self._in_flight > self._peak:
            self._peak = self._in_flight
        try:
            yield
        finally:
            self._in_flight -= 1
            self._semaphore.release()
