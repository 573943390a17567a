"""Precise unit tests for exception hierarchy.

Tests focus on meaningful behavior, not just field access.
"""

from laakhay.prune.core import (
    PayloadTooLargeError,
    PruneError,
    StoreError,
    StoreTimeoutError,
    TransientServiceError,
)


def test_payload_too_large_carries_path_and_status():
    error = PayloadTooLargeError("too big", path="/a")
    assert error.path == "/a"
    assert error.status_code == 413
    assert isinstance(error, StoreError)
    assert isinstance(error, PruneError)


def test_store_timeout_is_builtin_timeout():
    """StoreTimeoutError can be caught as the builtin TimeoutError."""
    error = StoreTimeoutError("slow", path="/a")
    assert isinstance(error, TimeoutError)
    assert isinstance(error, StoreError)


def test_store_error_with_status_code():
    error = TransientServiceError("unavailable", path="/a", status_code=503)
    assert str(error) == "unavailable"
    assert error.status_code == 503
    assert isinstance(error, PruneError)
