"""Precise unit tests for HTTPClient.

Tests focus on session management and mapping of HTTP failures onto the
store error taxonomy.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from laakhay.prune.core import (
    InvalidPathError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    StoreError,
    StoreTimeoutError,
    TransientServiceError,
)
from laakhay.prune.utils import HTTPClient, error_for_response


def _mock_session(status: int = 200, body: str = "", error: BaseException | None = None) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=body)

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    if error is not None:
        session.request = MagicMock(side_effect=error)
    else:
        session.request = MagicMock(return_value=ctx)
    return session


class TestErrorForResponse:
    """Test status/body classification."""

    @pytest.mark.parametrize(
        ("status", "body", "expected"),
        [
            (413, "", PayloadTooLargeError),
            (400, '{"error": "Data to write exceeds the maximum size that can be modified with a single request."}', PayloadTooLargeError),
            (400, '{"error": "write_too_big"}', PayloadTooLargeError),
            (401, '{"error": "Permission denied"}', PermissionDeniedError),
            (403, "", PermissionDeniedError),
            (404, "", NotFoundError),
            (400, '{"error": "Invalid path"}', InvalidPathError),
            (408, "", StoreTimeoutError),
            (429, "", TransientServiceError),
            (500, "oops", TransientServiceError),
            (503, "", TransientServiceError),
            (409, "", StoreError),
        ],
    )
    def test_mapping(self, status, body, expected):
        error = error_for_response(status, body, "/a")
        assert type(error) is expected
        assert error.path == "/a"

    def test_message_includes_error_detail(self):
        error = error_for_response(401, '{"error": "Permission denied"}', "/a")
        assert str(error) == "401 for /a: Permission denied"
        assert error.status_code == 401


class TestHTTPClientSessionManagement:
    """Test HTTPClient session management."""

    def test_init(self):
        client = HTTPClient(base_url="https://api.example.com/", timeout=10.0)
        assert client.timeout.total == 10.0
        assert client.base_url == "https://api.example.com"
        assert client._session is None

    @pytest.mark.asyncio
    async def test_session_property_creates_session(self):
        client = HTTPClient()
        session = client.session
        assert isinstance(session, aiohttp.ClientSession)
        assert client._session is session
        await client.close()

    @pytest.mark.asyncio
    async def test_close_idempotent(self):
        client = HTTPClient()
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with HTTPClient() as client:
            assert client.session is not None
        assert client._session is None or client._session.closed


class TestHTTPClientRequests:
    """Test request dispatch and error mapping."""

    @pytest.mark.asyncio
    async def test_get_decodes_json_and_joins_base_url(self):
        client = HTTPClient(base_url="https://api.example.com")
        client._session = _mock_session(200, '{"a": true}')

        data = await client.get("/x.json", path="/x", params={"shallow": "true"})

        assert data == {"a": True}
        method, url = client._session.request.call_args.args
        assert method == "GET"
        assert url == "https://api.example.com/x.json"

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self):
        client = HTTPClient(base_url="https://api.example.com")
        client._session = _mock_session(200, "")
        assert await client.delete("/x.json", path="/x") is None

    @pytest.mark.asyncio
    async def test_error_status_raises_mapped_error(self):
        client = HTTPClient(base_url="https://api.example.com")
        client._session = _mock_session(413, "")
        with pytest.raises(PayloadTooLargeError):
            await client.delete("/x.json", path="/x")

    @pytest.mark.asyncio
    async def test_timeout_raises_store_timeout(self):
        client = HTTPClient(base_url="https://api.example.com")
        client._session = _mock_session(error=asyncio.TimeoutError())
        with pytest.raises(StoreTimeoutError):
            await client.get("/x.json", path="/x", timeout=0.5)

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        client = HTTPClient(base_url="https://api.example.com")
        client._session = _mock_session(error=aiohttp.ClientConnectionError("reset"))
        with pytest.raises(TransientServiceError):
            await client.get("/x.json", path="/x")

    @pytest.mark.asyncio
    async def test_session_timeout_used_when_no_deadline_given(self):
        client = HTTPClient(base_url="https://api.example.com", timeout=12.0)
        client._session = _mock_session(200, "{}")

        await client.get("/x.json", path="/x")

        assert "timeout" not in client._session.request.call_args.kwargs

    @pytest.mark.asyncio
    async def test_explicit_deadline_overrides_session_timeout(self):
        client = HTTPClient(base_url="https://api.example.com", timeout=12.0)
        client._session = _mock_session(200, "{}")

        await client.delete("/x.json", path="/x", timeout=2.5)

        request_timeout = client._session.request.call_args.kwargs["timeout"]
        assert isinstance(request_timeout, aiohttp.ClientTimeout)
        assert request_timeout.total == 2.5
