"""Remote document model and item-array codec."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import Field, TypeAdapter, ValidationError

from candlesync._constants import CONTENT_INDENT
from candlesync.exceptions import MalformedDocument
from candlesync.models._base import SyncBaseModel
from candlesync.models.item import Item

_logger = logging.getLogger(__name__)

_ITEM_LIST = TypeAdapter(list[Item])


class RemoteDocument(SyncBaseModel):
    """Item collection as read from the store, plus its revision marker."""

    items: tuple[Item, ...] = Field(default_factory=tuple)
    revision: str | None = None
    malformed: bool = False


def dedupe_items(items: Iterable[Item]) -> tuple[Item, ...]:
    """Drop later items that repeat an id already seen."""
    seen: set[int] = set()
    kept: list[Item] = []
    for item in items:
        if item.id in seen:
            _logger.warning("Dropping duplicate item id=%d from stored document", item.id)
            continue
        seen.add(item.id)
        kept.append(item)
    return tuple(kept)


def parse_items(content: str | None) -> tuple[Item, ...]:
    """Decode file content into a collection.

    Missing, blank or ``null`` content is an empty collection.

    Raises
    ------
    MalformedDocument
        If the content is not JSON, not an array, or an element is not a
        valid item.
    """
    if content is None or not content.strip():
        return ()
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as exc:
        raise MalformedDocument(f"content is not JSON: {exc}") from exc
    if data is None:
        return ()
    if not isinstance(data, list):
        raise MalformedDocument(f"content must be a JSON array, got {type(data).__name__}")
    try:
        items = _ITEM_LIST.validate_python(data)
    except ValidationError as exc:
        raise MalformedDocument(f"content is not a valid item array: {exc.error_count()} error(s)") from exc
    return dedupe_items(items)


def dump_items(items: Iterable[Item]) -> str:
    """Encode a collection as file content."""
    return json.dumps([item.to_wire() for item in items], indent=CONTENT_INDENT)
