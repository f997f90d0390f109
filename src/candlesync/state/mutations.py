"""Local mutation transforms.

A mutation is applied twice: once to the local snapshot for immediate
feedback, and once more to the freshly fetched remote collection right
before it is written back. Transforms are therefore pure functions of the
collection they are given.
"""

from __future__ import annotations

from typing import Any

from pydantic import StrictFloat, StrictInt, StrictStr

from candlesync.models._base import SyncBaseModel
from candlesync.models.item import Item
from candlesync.models.result import MutationKind


def next_item_id(items: tuple[Item, ...]) -> int:
    """``max(ids) + 1``, or ``1`` for an empty collection."""
    return max((item.id for item in items), default=0) + 1


def find_item(items: tuple[Item, ...], item_id: int) -> Item | None:
    for item in items:
        if item.id == item_id:
            return item
    return None


class Mutation(SyncBaseModel):
    """Base for all transforms."""

    kind: MutationKind

    @property
    def item_id(self) -> int:
        raise NotImplementedError

    def rebase(self, items: tuple[Item, ...]) -> Mutation:
        """Return the mutation to use against *items* instead of the local snapshot."""
        return self

    def apply(self, items: tuple[Item, ...]) -> tuple[Item, ...]:
        raise NotImplementedError

    def pick(self, items: tuple[Item, ...]) -> Item | None:
        """The affected item inside a collection this mutation was applied to."""
        return find_item(items, self.item_id)


class AddItem(Mutation):
    kind: MutationKind = MutationKind.ADD
    item: Item

    @property
    def item_id(self) -> int:
        return self.item.id

    def rebase(self, items: tuple[Item, ...]) -> AddItem:
        existing = find_item(items, self.item.id)
        if existing is None or existing == self.item:
            return self
        # Another client took this id first; keep theirs and take the next free one.
        return AddItem(item=self.item.with_changes(id=next_item_id(items)))

    def apply(self, items: tuple[Item, ...]) -> tuple[Item, ...]:
        existing = find_item(items, self.item.id)
        if existing is not None:
            if existing == self.item:
                return items
            raise ValueError(f"item id {self.item.id} already exists")
        return (*items, self.item)


class UpdateItem(Mutation):
    """Rename, move, or both. Missing ids are a no-op."""

    kind: MutationKind = MutationKind.UPDATE
    target_id: StrictInt
    name: StrictStr | None = None
    x: StrictInt | StrictFloat | None = None
    y: StrictInt | StrictFloat | None = None

    @property
    def item_id(self) -> int:
        return self.target_id

    def changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for key in ("name", "x", "y"):
            value = getattr(self, key)
            if value is not None:
                changes[key] = value
        return changes

    def apply(self, items: tuple[Item, ...]) -> tuple[Item, ...]:
        changes = self.changes()
        if not changes:
            return items
        return tuple(item.with_changes(**changes) if item.id == self.target_id else item for item in items)


class RemoveItem(Mutation):
    """Remove by id. Removing an absent id leaves the collection unchanged."""

    kind: MutationKind = MutationKind.REMOVE
    target_id: StrictInt

    @property
    def item_id(self) -> int:
        return self.target_id

    def apply(self, items: tuple[Item, ...]) -> tuple[Item, ...]:
        return tuple(item for item in items if item.id != self.target_id)

    def pick(self, items: tuple[Item, ...]) -> Item | None:
        return None
