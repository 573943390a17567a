"""HTTP client helper."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from ..core.exceptions import (
    InvalidPathError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    StoreError,
    StoreTimeoutError,
    TransientServiceError,
)

_TOO_LARGE_MARKERS = ("exceeds the maximum size", "write_too_big", "payload too large")


def error_for_response(status: int, body: str, path: str) -> StoreError:
    """Map an unsuccessful HTTP response onto the store error taxonomy.

    Args:
        status: HTTP status code
        body: Raw response body
        path: Tree path the request targeted

    Returns:
        StoreError subclass describing the failure
    """
    detail = _error_detail(body)
    message = f"{status} for {path}: {detail}" if detail else f"{status} for {path}"
    lowered = detail.lower()

    if status == 413 or any(marker in lowered for marker in _TOO_LARGE_MARKERS):
        return PayloadTooLargeError(message, path=path)
    if status in (401, 403):
        return PermissionDeniedError(message, path=path, status_code=status)
    if status == 404:
        return NotFoundError(message, path=path, status_code=status)
    if status in (408, 504):
        return StoreTimeoutError(message, path=path, status_code=status)
    if status == 429 or status >= 500:
        return TransientServiceError(message, path=path, status_code=status)
    if status == 400:
        return InvalidPathError(message, path=path, status_code=status)
    return StoreError(message, path=path, status_code=status)


def _error_detail(body: str) -> str:
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        return body.strip()
    if isinstance(payload, dict) and "error" in payload:
        return str(payload["error"])
    return body.strip()


class HTTPClient:
    """Async HTTP client wrapper."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = dict(headers or {})
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
        return self._session

    def _url(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def get(
        self,
        url: str,
        *,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET request returning decoded JSON."""
        return await self._request("GET", url, path=path, params=params, timeout=timeout)

    async def delete(
        self,
        url: str,
        *,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """DELETE request returning decoded JSON (None for empty bodies)."""
        return await self._request("DELETE", url, path=path, params=params, timeout=timeout)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        path: str,
        params: Optional[Dict[str, Any]],
        timeout: Optional[float],
    ) -> Any:
        kwargs: Dict[str, Any] = {"params": params}
        # Without an explicit deadline the session ClientTimeout applies.
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)
        try:
            async with self.session.request(method, self._url(url), **kwargs) as response:
                body = await response.text()
                if response.status >= 400:
                    raise error_for_response(response.status, body, path)
                return json.loads(body) if body else None
        except asyncio.TimeoutError as e:
            raise StoreTimeoutError(f"{method} {path} timed out", path=path) from e
        except aiohttp.ClientConnectionError as e:
            raise TransientServiceError(f"{method} {path} connection failed: {e}", path=path) from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "HTTPClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
