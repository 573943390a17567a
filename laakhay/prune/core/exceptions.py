"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.result import PruneResult


class PruneError(Exception):
    """Base exception for all library errors."""

    pass


class StoreError(PruneError):
    """Error reported by (or while talking to) the remote tree store."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class StoreTimeoutError(StoreError, TimeoutError):
    """A listing or delete call did not complete before its deadline."""

    pass


class TransientServiceError(StoreError):
    """Store is temporarily unavailable (5xx, throttling, dropped connection)."""

    pass


class PayloadTooLargeError(StoreError):
    """Delete request exceeds the store's write size limit.

    This is a structural signal, not a fault: the path must be split into
    its children rather than retried.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, path=path, status_code=413)


class PermissionDeniedError(StoreError):
    """Caller is not allowed to read or write the path."""

    pass


class NotFoundError(StoreError):
    """Store or database instance does not exist."""

    pass


class InvalidPathError(StoreError):
    """Path is malformed or contains characters the store rejects."""

    pass


class RetryExhaustedError(PruneError):
    """Retryable operation failed on every allowed attempt."""

    def __init__(self, message: str, attempts: int, path: str | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.path = path


class RetryCancelledError(PruneError):
    """Retry loop stopped because the run was cancelled between attempts."""

    def __init__(self, message: str, attempts: int, path: str | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.path = path


class PartialFailureError(PruneError):
    """Raised by PruneResult.raise_for_status when some paths could not be removed."""

    def __init__(self, message: str, result: PruneResult) -> None:
        super().__init__(message)
        self.result = result

    @property
    def failed_paths(self) -> set[str]:
        return self.result.failed_paths


class PruneAbortedError(PruneError):
    """Raised by PruneResult.raise_for_status when the run was cancelled."""

    def __init__(self, message: str, result: PruneResult) -> None:
        super().__init__(message)
        self.result = result
