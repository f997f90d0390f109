"""RemoteStoreClient: async access to the shared document."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import aiohttp

from candlesync._api import documents as _documents_api
from candlesync._transport import HttpTransport, Transport
from candlesync.config import SyncConfig
from candlesync.exceptions import CandleSyncError, NotConfigured
from candlesync.models.document import RemoteDocument
from candlesync.models.item import Item

_logger = logging.getLogger(__name__)


class RemoteStoreClient:
    """Thin client over the get/patch document API.

    Usage::

        async with RemoteStoreClient(config) as remote:
            document = await remote.fetch_document()

    A custom *transport* may be passed instead of an HTTP session; it is
    used as-is and no session is created.
    """

    def __init__(
        self,
        config: SyncConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._custom_transport = transport is not None
        self._last_revision: str | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RemoteStoreClient:
        if self._custom_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._custom_transport:
            return
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def is_configured(self) -> bool:
        """Whether a credential is available for writes."""
        return self._config.can_write

    @property
    def last_revision(self) -> str | None:
        """Revision marker seen on the most recent successful read or write."""
        return self._last_revision

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise CandleSyncError("Client not initialized. Use 'async with RemoteStoreClient(...) as remote:'")
        return self._transport

    # ------------------------------------------------------------------
    # Document operations
    # ------------------------------------------------------------------

    async def fetch_document(self) -> RemoteDocument:
        """Read the current collection and its revision marker.

        Raises
        ------
        RemoteUnavailable
            On network failure.
        RemoteRejected
            On a non-2xx answer.
        """
        transport = self._require_transport()
        document = await _documents_api.fetch_document(self._config, transport)
        self._last_revision = document.revision
        return document

    async def write_document(self, items: Iterable[Item]) -> str | None:
        """Replace the whole collection in the store.

        Raises
        ------
        NotConfigured
            No credential is configured; nothing is sent.
        RemoteUnavailable
            On network failure.
        RemoteRejected
            On a non-2xx answer.
        """
        if not self.is_configured:
            raise NotConfigured("No credential configured; the document is read-only")
        transport = self._require_transport()
        revision = await _documents_api.write_document(self._config, transport, tuple(items))
        self._last_revision = revision
        return revision
