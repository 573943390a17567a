"""REST tree store backed by a JSON tree HTTP API.

Requests follow the ``{base_url}{path}.json`` convention:

    - list:   GET    ?shallow=true&orderBy="$key"&limitToFirst=N&startAfter="k"&timeout=Nms
    - delete: DELETE ?print=silent&writeSizeLimit=<limit>&timeout=Nms

A delete larger than ``writeSizeLimit`` is rejected by the server, which
surfaces here as PayloadTooLargeError.

Pagination assumes the server orders ``$key`` as plain string comparison.
Servers that sort integer-like keys numerically (so "9" precedes "10") are
not supported: keys are re-sorted and filtered lexicographically here, and
such children could be skipped during enumeration.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.base import TreeStore
from ..core.exceptions import InvalidPathError
from ..core.path import TreePath
from ..utils.http import HTTPClient

logger = logging.getLogger(__name__)

WriteSizeLimit = Literal["tiny", "small", "medium", "large", "unlimited"]

# Characters the store rejects inside keys.
FORBIDDEN_KEY_CHARS = frozenset(".$#[]")


class RestStoreSettings(BaseModel):
    """Connection settings for RestTreeStore."""

    base_url: str = Field(..., min_length=1)
    write_size_limit: WriteSizeLimit = "tiny"
    auth_token: str | None = None
    session_timeout: float = Field(default=60.0, gt=0)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate scheme and drop trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class RestTreeStore(TreeStore):
    """TreeStore talking to a remote JSON tree over HTTP."""

    def __init__(self, settings: RestStoreSettings, http: HTTPClient | None = None) -> None:
        super().__init__("rest")
        self._settings = settings
        headers = {"Authorization": f"Bearer {settings.auth_token}"} if settings.auth_token else None
        self._http = http or HTTPClient(
            base_url=settings.base_url,
            timeout=settings.session_timeout,
            headers=headers,
        )

    @property
    def settings(self) -> RestStoreSettings:
        return self._settings

    async def list_path(
        self,
        path: str,
        num_children: int,
        start_after: str | None = None,
        timeout: float | None = None,
    ) -> list[str]:
        if num_children <= 0:
            raise ValueError("num_children must be positive")
        params: dict[str, Any] = {
            "shallow": "true",
            "orderBy": json.dumps("$key"),
            "limitToFirst": str(num_children),
        }
        if start_after is not None:
            params["startAfter"] = json.dumps(start_after)
        if timeout is not None:
            params["timeout"] = _timeout_param(timeout)

        data = await self._http.get(
            self._resource(path), path=path, params=params, timeout=_client_timeout(timeout)
        )
        if not isinstance(data, dict):
            # Missing paths come back as null and leaves as scalars.
            return []
        keys = sorted(data)
        # Servers may ignore startAfter on shallow reads; enforce filter-then-limit here too.
        if start_after is not None:
            keys = [key for key in keys if key > start_after]
        return keys[:num_children]

    async def delete_subtree(self, path: str, timeout: float | None = None) -> None:
        params: dict[str, Any] = {
            "print": "silent",
            "writeSizeLimit": self._settings.write_size_limit,
        }
        if timeout is not None:
            params["timeout"] = _timeout_param(timeout)
        await self._http.delete(
            self._resource(path), path=path, params=params, timeout=_client_timeout(timeout)
        )
        logger.debug(f"Deleted {path}")

    async def close(self) -> None:
        await self._http.close()

    def _resource(self, path: str) -> str:
        target = TreePath.parse(path)
        for segment in target.segments:
            bad = FORBIDDEN_KEY_CHARS.intersection(segment)
            if bad:
                raise InvalidPathError(
                    f"Key {segment!r} contains forbidden characters {''.join(sorted(bad))}",
                    path=path,
                )
        if target.is_root:
            return "/.json"
        return "/" + "/".join(quote(s, safe="") for s in target.segments) + ".json"


def _timeout_param(timeout: float) -> str:
    return f"{max(int(timeout * 1000), 1)}ms"


def _client_timeout(timeout: float | None) -> float | None:
    # Give the server a chance to report its own timeout before the socket gives up.
    return None if timeout is None else timeout * 2
