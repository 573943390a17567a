"""Shared fixtures for unit tests."""

from __future__ import annotations

import asyncio

import pytest

from laakhay.prune.core import PruneConfig


@pytest.fixture
def fast_config() -> PruneConfig:
    """Small, quick configuration for orchestrator runs."""
    return PruneConfig(
        max_concurrency=4,
        page_size=2,
        call_timeout=1.0,
        max_attempts=3,
        backoff_base=0.001,
        backoff_max=0.01,
        backoff_jitter=0.5,
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Delays recorded by ``no_sleep``."""
    return []


@pytest.fixture
def no_sleep(sleeps):
    """Sleep replacement that records delays and only yields to the loop."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)
        await asyncio.sleep(0)

    return _sleep
