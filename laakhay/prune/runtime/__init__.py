"""Runtime layer: orchestration, pagination, retries and progress plumbing.

Architecture:
    The runtime layer consists of:
    - tokens.py: Concurrency token pool bounding in-flight store calls
    - retry.py: Failure classification and exponential backoff
    - paging.py: Cursor pager over a ListingClient
    - progress.py: Progress sinks and the reporter that fans events out
    - orchestrator.py: Chunked delete orchestrator and the prune() helper
    - telemetry.py: Structured logging
"""

from __future__ import annotations

from .orchestrator import ChunkedDeleteOrchestrator, prune
from .paging import CursorPager
from .progress import (
    InMemoryProgressSink,
    LoggingProgressSink,
    ProgressReporter,
    ProgressSink,
)
from .retry import RetryPolicy
from .tokens import ConcurrencyTokenPool

__all__ = [
    "ChunkedDeleteOrchestrator",
    "prune",
    "CursorPager",
    "ProgressSink",
    "ProgressReporter",
    "InMemoryProgressSink",
    "LoggingProgressSink",
    "RetryPolicy",
    "ConcurrencyTokenPool",
]
