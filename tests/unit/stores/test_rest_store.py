"""Unit tests for RestTreeStore request building and response handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from laakhay.prune.core import InvalidPathError, PayloadTooLargeError
from laakhay.prune.stores import RestStoreSettings, RestTreeStore
from laakhay.prune.utils import HTTPClient


@pytest.fixture
def http():
    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock()
    client.delete = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client


@pytest.fixture
def store(http):
    settings = RestStoreSettings(base_url="https://tree.example.com/", write_size_limit="small")
    return RestTreeStore(settings, http=http)


class TestRestStoreSettings:
    def test_trailing_slash_dropped(self):
        assert RestStoreSettings(base_url="https://x.example.com/").base_url == "https://x.example.com"

    def test_scheme_required(self):
        with pytest.raises(ValidationError):
            RestStoreSettings(base_url="x.example.com")

    def test_write_size_limit_choices(self):
        with pytest.raises(ValidationError):
            RestStoreSettings(base_url="https://x.example.com", write_size_limit="huge")


class TestListPath:
    @pytest.mark.asyncio
    async def test_builds_shallow_ordered_query(self, store, http):
        http.get.return_value = {"b": True, "a": True}

        keys = await store.list_path("/users", 2, start_after="0", timeout=1.5)

        assert keys == ["a", "b"]
        url = http.get.call_args.args[0]
        kwargs = http.get.call_args.kwargs
        assert url == "/users.json"
        assert kwargs["path"] == "/users"
        assert kwargs["params"] == {
            "shallow": "true",
            "orderBy": '"$key"',
            "limitToFirst": "2",
            "startAfter": '"0"',
            "timeout": "1500ms",
        }
        assert kwargs["timeout"] == 3.0

    @pytest.mark.asyncio
    async def test_keys_ordered_as_strings(self, store, http):
        http.get.return_value = {"9": True, "10": True, "2": True}
        assert await store.list_path("/ids", 10) == ["10", "2", "9"]
        assert await store.list_path("/ids", 10, start_after="2") == ["9"]

    @pytest.mark.asyncio
    async def test_first_page_omits_start_after(self, store, http):
        http.get.return_value = {}
        await store.list_path("/", 10)
        assert http.get.call_args.args[0] == "/.json"
        assert "startAfter" not in http.get.call_args.kwargs["params"]
        assert "timeout" not in http.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [None, 5, "leaf", True])
    async def test_missing_or_leaf_is_empty(self, store, http, payload):
        http.get.return_value = payload
        assert await store.list_path("/a", 10) == []

    @pytest.mark.asyncio
    async def test_enforces_filter_then_limit_locally(self, store, http):
        """Servers that ignore startAfter still yield a resumable page."""
        http.get.return_value = {"1": True, "2": True, "3": True, "4": True}
        assert await store.list_path("/", 1, start_after="2") == ["3"]

    @pytest.mark.asyncio
    async def test_forbidden_key_characters(self, store, http):
        with pytest.raises(InvalidPathError):
            await store.list_path("/bad.key", 1)
        http.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_keys_are_url_quoted(self, store, http):
        http.get.return_value = {}
        await store.list_path("/with space/é", 1)
        assert http.get.call_args.args[0] == "/with%20space/%C3%A9.json"


class TestDeleteSubtree:
    @pytest.mark.asyncio
    async def test_sends_silent_delete_with_size_limit(self, store, http):
        await store.delete_subtree("/users/alice", timeout=2.0)

        assert http.delete.call_args.args[0] == "/users/alice.json"
        assert http.delete.call_args.kwargs["params"] == {
            "print": "silent",
            "writeSizeLimit": "small",
            "timeout": "2000ms",
        }

    @pytest.mark.asyncio
    async def test_structural_error_propagates(self, store, http):
        http.delete.side_effect = PayloadTooLargeError("too big", path="/a")
        with pytest.raises(PayloadTooLargeError):
            await store.delete_subtree("/a")


@pytest.mark.asyncio
async def test_close_closes_http_client(store, http):
    async with store:
        pass
    http.close.assert_awaited_once()


def test_auth_token_sets_bearer_header():
    store = RestTreeStore(RestStoreSettings(base_url="https://x.example.com", auth_token="tok"))
    assert store._http.headers == {"Authorization": "Bearer tok"}
