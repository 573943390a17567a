"""Laakhay Prune - Chunked subtree deletion for remote tree stores."""

from .core import (
    DeleteTransport,
    FailureKind,
    InvalidPathError,
    JobState,
    ListingClient,
    NotFoundError,
    PartialFailureError,
    PayloadTooLargeError,
    PermissionDeniedError,
    ProgressEventType,
    PruneAbortedError,
    PruneConfig,
    PruneError,
    RetryCancelledError,
    RetryExhaustedError,
    RunStatus,
    StoreError,
    StoreTimeoutError,
    TransientServiceError,
    TreePath,
    TreeStore,
)
from .models import DeleteJob, ProgressEvent, PruneResult, RunStats
from .runtime import (
    ChunkedDeleteOrchestrator,
    ConcurrencyTokenPool,
    CursorPager,
    InMemoryProgressSink,
    LoggingProgressSink,
    ProgressReporter,
    ProgressSink,
    RetryPolicy,
    prune,
)
from .stores import (
    InMemoryStoreConfig,
    InMemoryTreeStore,
    Internal,
    Leaf,
    RestStoreSettings,
    RestTreeStore,
)

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "ChunkedDeleteOrchestrator",
    "prune",
    "PruneConfig",
    "PruneResult",
    "RunStats",
    "RunStatus",
    # Building blocks
    "ConcurrencyTokenPool",
    "CursorPager",
    "RetryPolicy",
    "DeleteJob",
    "JobState",
    "FailureKind",
    "TreePath",
    # Progress
    "ProgressEvent",
    "ProgressEventType",
    "ProgressSink",
    "ProgressReporter",
    "InMemoryProgressSink",
    "LoggingProgressSink",
    # Stores
    "ListingClient",
    "DeleteTransport",
    "TreeStore",
    "InMemoryTreeStore",
    "InMemoryStoreConfig",
    "Leaf",
    "Internal",
    "RestTreeStore",
    "RestStoreSettings",
    # Exceptions
    "PruneError",
    "StoreError",
    "StoreTimeoutError",
    "TransientServiceError",
    "PayloadTooLargeError",
    "PermissionDeniedError",
    "NotFoundError",
    "InvalidPathError",
    "RetryExhaustedError",
    "RetryCancelledError",
    "PartialFailureError",
    "PruneAbortedError",
]
