"""Custom exception hierarchy for candlesync."""

from __future__ import annotations


class CandleSyncError(Exception):
    """Base exception for all candlesync errors."""


class SyncConfigError(CandleSyncError):
    """Invalid or missing configuration."""


class NotConfigured(SyncConfigError):
    """A write was attempted without a credential.

    Reads work anonymously, so a missing token is a valid read-only mode.
    Only :meth:`RemoteStoreClient.write_document` raises this, and it does so
    before any request is sent.
    """


class RemoteError(CandleSyncError):
    """Base for failures talking to the remote document store."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class RemoteUnavailable(RemoteError):
    """Network/transport failure, or a response body that is not JSON."""


class RemoteRejected(RemoteError):
    """The store answered with a non-2xx status (auth, not found, 422...)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        super().__init__(message, url=url)


class MalformedDocument(CandleSyncError):
    """File content is present but is not a valid item array.

    The document layer catches this and treats the file as empty; it never
    reaches callers of the public API.
    """
