"""Helpers for safe debug logging.

Request headers carry the write credential, and gist bodies embed the whole
candle file as a string. Both are shortened before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_CREDENTIAL_KEYS: frozenset[str] = frozenset({"authorization", "token", "cookie"})

#: Keys whose string value is file content; logged as a size only.
_CONTENT_KEYS: frozenset[str] = frozenset({"content"})

_MAX_DEPTH = 12


def _shorten(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…<truncated {len(text)} chars>"


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of *value* with credentials masked and file content summarized."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _shorten(value, max_string)

    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for raw_key, item in value.items():
            key = str(raw_key)
            lowered = key.lower()
            if lowered in _CREDENTIAL_KEYS:
                out[key] = "<redacted>"
            elif lowered in _CONTENT_KEYS and isinstance(item, str):
                out[key] = f"<content:{len(item)} chars>"
            else:
                out[key] = redact_for_log(item, max_string=max_string, _depth=_depth + 1)
        return out

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
