"""Collaborator contracts for the remote tree store.

Architecture:
    The orchestrator talks to the store through two narrow seams:
    - ListingClient: ordered, paginated enumeration of a path's direct children
    - DeleteTransport: atomic removal of everything under a path in one request

    Both are Protocols so tests and alternative backends can satisfy them
    without inheritance. TreeStore is the abstract base that concrete stores
    in ``laakhay.prune.stores`` extend; it bundles both operations with
    async context manager support.

Design Decisions:
    - Failures are raised, not returned: a delete either returns None or raises
      one of the StoreError subclasses (PayloadTooLargeError is the structural
      signal that triggers fan-out)
    - Timeouts are explicit deadline parameters; implementations fail the call
      themselves instead of being raced against a timer by the caller

See Also:
    - ChunkedDeleteOrchestrator: Consumes both contracts
    - CursorPager: Drives ListingClient across pages
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class ListingClient(Protocol):
    """Paginated, ordered enumeration of a path's direct children."""

    async def list_path(
        self,
        path: str,
        num_children: int,
        start_after: str | None = None,
        timeout: float | None = None,
    ) -> list[str]:
        """List child keys of ``path``.

        Keys strictly greater than ``start_after`` are selected first, then
        the selection is truncated to ``num_children`` entries. Missing paths
        and leaves yield an empty list.

        Raises:
            StoreTimeoutError: If no response arrives within ``timeout`` seconds
        """
        ...


@runtime_checkable
class DeleteTransport(Protocol):
    """Atomic subtree removal bounded by the store's write size limit."""

    async def delete_subtree(self, path: str, timeout: float | None = None) -> None:
        """Remove ``path`` and everything below it in one request.

        Raises:
            PayloadTooLargeError: If the subtree is too large for one request
            StoreTimeoutError: If no response arrives within ``timeout`` seconds
            TransientServiceError: On temporary store failures
            PermissionDeniedError: If the caller may not write ``path``
        """
        ...


class TreeStore(ABC):
    """Abstract base class for tree store backends."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def list_path(
        self,
        path: str,
        num_children: int,
        start_after: str | None = None,
        timeout: float | None = None,
    ) -> list[str]:
        """List child keys of ``path``."""
        ...

    @abstractmethod
    async def delete_subtree(self, path: str, timeout: float | None = None) -> None:
        """Remove ``path`` and everything below it."""
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
        return None

    async def __aenter__(self) -> TreeStore:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
