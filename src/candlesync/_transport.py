"""HTTP transport for the document store API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from candlesync._constants import ACCEPT_HEADER, USER_AGENT
from candlesync._redact import redact_for_log
from candlesync.config import SyncConfig
from candlesync.exceptions import RemoteRejected, RemoteUnavailable

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the document endpoint module.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str) -> dict[str, Any]:
        ...

    async def patch_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp-backed transport that maps failures onto the remote error taxonomy."""

    def __init__(self, config: SyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = (
            aiohttp.ClientTimeout(total=config.request_timeout) if config.request_timeout is not None else None
        )

    def _headers(self, *, with_body: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": ACCEPT_HEADER,
            "user-agent": USER_AGENT,
        }
        if with_body:
            headers["content-type"] = "application/json"
        if self._config.token:
            headers["authorization"] = f"token {self._config.token}"
        return headers

    async def get_json(self, url: str) -> dict[str, Any]:
        return await self._request("GET", url, headers=self._headers())

    async def patch_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        body = json.dumps(payload)
        return await self._request("PATCH", url, headers=self._headers(with_body=True), data=body)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: str | None = None,
    ) -> dict[str, Any]:
        _logger.debug("%s %s headers=%s", method, url, redact_for_log(headers))

        kwargs: dict[str, Any] = {"headers": dict(headers)}
        if data is not None:
            kwargs["data"] = data
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise RemoteRejected(
                        f"HTTP {resp.status} from {method} {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except RemoteRejected:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise RemoteUnavailable(f"{method} {url} failed: {exc!r}", url=url) from exc

        try:
            body_json = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RemoteUnavailable(f"Invalid JSON from {method} {url}: {text[:200]}", url=url) from exc

        _logger.debug("%s %s -> %s", method, url, redact_for_log(body_json))
        if not isinstance(body_json, dict):
            raise RemoteUnavailable(f"Expected a JSON object from {method} {url}", url=url)
        return body_json
