"""Document endpoint: fetch and replace the tracked file of a gist.

The store only supports whole-file replacement, so every write sends the
complete item array.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from candlesync._transport import Transport
from candlesync.config import SyncConfig
from candlesync.exceptions import MalformedDocument, RemoteUnavailable
from candlesync.models.document import RemoteDocument, dump_items, parse_items
from candlesync.models.item import Item

_logger = logging.getLogger(__name__)


def _extract_revision(body: Mapping[str, Any]) -> str | None:
    value = body.get("updated_at")
    if value is None:
        return None
    return str(value)


def _extract_content(config: SyncConfig, body: Mapping[str, Any]) -> str | None:
    files = body.get("files")
    if not isinstance(files, Mapping):
        return None
    entry = files.get(config.filename)
    if not isinstance(entry, Mapping):
        return None
    content = entry.get("content")
    return content if isinstance(content, str) else None


def parse_document_response(config: SyncConfig, body: Mapping[str, Any]) -> RemoteDocument:
    """Turn a GET response into a :class:`RemoteDocument`.

    Malformed file content degrades to an empty collection.
    """
    revision = _extract_revision(body)
    content = _extract_content(config, body)
    try:
        items = parse_items(content)
    except MalformedDocument as exc:
        _logger.warning("Ignoring malformed %s in document %s: %s", config.filename, config.document_id, exc)
        return RemoteDocument(items=(), revision=revision, malformed=True)
    return RemoteDocument(items=items, revision=revision)


def build_patch_payload(config: SyncConfig, items: Iterable[Item]) -> dict[str, Any]:
    return {"files": {config.filename: {"content": dump_items(items)}}}


async def fetch_document(config: SyncConfig, transport: Transport) -> RemoteDocument:
    body = await transport.get_json(config.document_url)
    document = parse_document_response(config, body)
    _logger.debug(
        "Fetched %d item(s) from %s revision=%s",
        len(document.items),
        config.document_id,
        document.revision,
    )
    return document


async def write_document(config: SyncConfig, transport: Transport, items: Iterable[Item]) -> str | None:
    """Replace the file content and return the store's new revision marker."""
    payload = build_patch_payload(config, items)
    body = await transport.patch_json(config.document_url, payload)
    if not isinstance(body, Mapping):
        raise RemoteUnavailable("PATCH response is not a JSON object", url=config.document_url)
    revision = _extract_revision(body)
    _logger.debug("Wrote %s to %s revision=%s", config.filename, config.document_id, revision)
    return revision
