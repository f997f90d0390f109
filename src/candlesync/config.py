"""Client configuration for candlesync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from candlesync._constants import BASE_URL, DEFAULT_FILENAME, DEFAULT_POLL_INTERVAL
from candlesync.exceptions import SyncConfigError


def _env_float(value: str | None, name: str) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise SyncConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_str(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Connection settings for the remote document store.

    Parameters
    ----------
    document_id : str
        Identifier of the gist holding the item file.
    token : str or None
        Credential used for writes. ``None`` is a valid read-only mode:
        fetching and polling work, mutations fail with
        :class:`~candlesync.exceptions.NotConfigured`.
    base_url : str
        Documents endpoint. Defaults to the GitHub gists API.
    filename : str
        Name of the tracked file inside the document.
    poll_interval : float
        Default seconds between poll ticks.
    request_timeout : float or None
        Total per-request timeout in seconds. ``None`` keeps aiohttp's
        default.
    """

    document_id: str
    token: str | None = None
    base_url: str = BASE_URL
    filename: str = DEFAULT_FILENAME
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.document_id or not self.document_id.strip():
            raise SyncConfigError("document_id must be non-empty")
        if not self.filename:
            raise SyncConfigError("filename must be non-empty")
        if self.poll_interval <= 0:
            raise SyncConfigError(f"poll_interval must be positive, got {self.poll_interval}")

    @property
    def document_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.document_id}"

    @property
    def can_write(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from environment variables.

        Reads ``CANDLESYNC_DOCUMENT_ID`` and the optional ``CANDLESYNC_*``
        variables. Explicit keyword arguments override environment values.

        Raises
        ------
        SyncConfigError
            When no document id is available from either source.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CANDLESYNC_DOCUMENT_ID": "document_id",
            "CANDLESYNC_TOKEN": "token",
            "CANDLESYNC_BASE_URL": "base_url",
            "CANDLESYNC_FILENAME": "filename",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = _env_str(env.get(env_key))
            if val is not None:
                config_kwargs[field_name] = val

        if "poll_interval" not in overrides:
            interval = _env_float(env.get("CANDLESYNC_POLL_INTERVAL"), "CANDLESYNC_POLL_INTERVAL")
            if interval is not None:
                config_kwargs["poll_interval"] = interval

        if "request_timeout" not in overrides:
            timeout = _env_float(env.get("CANDLESYNC_REQUEST_TIMEOUT"), "CANDLESYNC_REQUEST_TIMEOUT")
            if timeout is not None:
                config_kwargs["request_timeout"] = timeout

        config_kwargs.update(overrides)

        if "document_id" not in config_kwargs:
            raise SyncConfigError("CANDLESYNC_DOCUMENT_ID is not set")

        return cls(**config_kwargs)
