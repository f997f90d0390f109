"""Data models for candlesync."""

from candlesync.models.document import RemoteDocument, dump_items, parse_items
from candlesync.models.item import Item
from candlesync.models.result import MutationKind, MutationResult

__all__ = [
    "Item",
    "MutationKind",
    "MutationResult",
    "RemoteDocument",
    "dump_items",
    "parse_items",
]
