"""Core components."""

from .base import DeleteTransport, ListingClient, TreeStore
from .config import PruneConfig
from .enums import FailureKind, JobState, ProgressEventType, RunStatus
from .exceptions import (
    InvalidPathError,
    NotFoundError,
    PartialFailureError,
    PayloadTooLargeError,
    PermissionDeniedError,
    PruneAbortedError,
    PruneError,
    RetryCancelledError,
    RetryExhaustedError,
    StoreError,
    StoreTimeoutError,
    TransientServiceError,
)
from .path import TreePath, validate_key

__all__ = [
    "ListingClient",
    "DeleteTransport",
    "TreeStore",
    "PruneConfig",
    "FailureKind",
    "JobState",
    "ProgressEventType",
    "RunStatus",
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
    "TreePath",
    "validate_key",
]
