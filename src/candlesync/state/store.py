"""Local in-memory state cache.

This is the single source of truth rendered by the presentation layer. Only
the sync engine mutates it.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable

from candlesync.models.item import Item
from candlesync.state.mutations import AddItem, Mutation, next_item_id


def _check_unique(items: tuple[Item, ...]) -> None:
    seen: set[int] = set()
    for item in items:
        if item.id in seen:
            raise ValueError(f"duplicate item id {item.id}")
        seen.add(item.id)


def _apply(items: tuple[Item, ...], mutation: Mutation) -> tuple[Item, ...]:
    return mutation.rebase(items).apply(items)


class LocalStateCache:
    """Ordered item collection plus a derived id counter.

    The visible snapshot is the *base* (last state known to match the store)
    with every unsettled optimistic mutation replayed on top, in the order
    they were applied. Replacing the base keeps the other overlays, so two
    overlapping mutations do not hide each other's optimistic change.
    """

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._base: tuple[Item, ...] = ()
        self._snapshot: tuple[Item, ...] = ()
        self._overlays: dict[int, Mutation] = {}
        self._tokens = itertools.count(1)
        self._next_id = 1
        self.replace(items)

    @property
    def base(self) -> tuple[Item, ...]:
        return self._base

    @property
    def next_id(self) -> int:
        """Id the next locally created item will get."""
        return self._next_id

    @property
    def pending(self) -> int:
        """Number of optimistic mutations not yet settled."""
        return len(self._overlays)

    def snapshot(self) -> tuple[Item, ...]:
        return self._snapshot

    def replace(self, items: Iterable[Item], *, settle: int | None = None) -> None:
        """Swap the base collection wholesale.

        When *settle* is given, that optimistic overlay is dropped in the same
        step (its effect is expected to be part of *items*). The id counter is
        recomputed from the resulting snapshot.
        """
        new_base = tuple(items)
        _check_unique(new_base)
        self._base = new_base
        if settle is not None:
            self._overlays.pop(settle, None)
        self._rebuild()
        self._next_id = next_item_id(self._snapshot)

    def apply_optimistic(self, mutation: Mutation) -> int:
        """Show *mutation* immediately and return a token for settling it."""
        token = next(self._tokens)
        self._overlays[token] = mutation
        self._snapshot = _apply(self._snapshot, mutation)
        if isinstance(mutation, AddItem):
            self._next_id = max(self._next_id, next_item_id(self._snapshot))
        return token

    def settle(self, token: int, *, keep: bool = False) -> None:
        """Forget an overlay, or fold it into the base when *keep* is true."""
        mutation = self._overlays.pop(token, None)
        if mutation is None:
            return
        if keep:
            self._base = _apply(self._base, mutation)
        self._rebuild()
        self._next_id = next_item_id(self._snapshot)

    def _rebuild(self) -> None:
        snapshot = self._base
        for mutation in self._overlays.values():
            snapshot = _apply(snapshot, mutation)
        self._snapshot = snapshot
