from __future__ import annotations

import pytest

from candlesync.models.item import Item
from candlesync.models.result import MutationKind
from candlesync.state.mutations import AddItem, RemoveItem, UpdateItem, next_item_id
from candlesync.state.store import LocalStateCache


def _items(*ids: int) -> tuple[Item, ...]:
    return tuple(Item(id=i, x=i * 10, y=i * 20, name=f"c{i}") for i in ids)


def test_empty_cache_starts_counter_at_one() -> None:
    cache = LocalStateCache()
    assert cache.snapshot() == ()
    assert cache.next_id == 1


def test_replace_recomputes_counter_from_max_id() -> None:
    cache = LocalStateCache(_items(1, 2, 7))
    assert cache.next_id == 8

    cache.replace(_items(1, 2))
    assert cache.next_id == 3

    cache.replace(())
    assert cache.next_id == 1


def test_replace_rejects_duplicate_ids() -> None:
    cache = LocalStateCache()
    with pytest.raises(ValueError, match="duplicate"):
        cache.replace((Item(id=1, x=0, y=0), Item(id=1, x=1, y=1)))


def test_optimistic_add_shows_immediately_and_advances_counter() -> None:
    cache = LocalStateCache(_items(1))

    cache.apply_optimistic(AddItem(item=Item(id=2, x=5, y=5)))

    assert [item.id for item in cache.snapshot()] == [1, 2]
    assert [item.id for item in cache.base] == [1]
    assert cache.next_id == 3
    assert cache.pending == 1


def test_replace_with_settle_drops_only_that_overlay() -> None:
    cache = LocalStateCache(_items(1))
    first = cache.apply_optimistic(AddItem(item=Item(id=2, x=0, y=0)))
    cache.apply_optimistic(UpdateItem(kind=MutationKind.RENAME, target_id=1, name="renamed"))

    cache.replace((*_items(1), Item(id=2, x=0, y=0)), settle=first)

    snapshot = cache.snapshot()
    assert [item.id for item in snapshot] == [1, 2]
    assert snapshot[0].name == "renamed"
    assert cache.pending == 1


def test_settle_without_keep_reverts_optimistic_change() -> None:
    cache = LocalStateCache(_items(1, 2))
    token = cache.apply_optimistic(RemoveItem(target_id=2))
    assert [item.id for item in cache.snapshot()] == [1]

    cache.settle(token)

    assert [item.id for item in cache.snapshot()] == [1, 2]
    assert cache.pending == 0


def test_settle_with_keep_folds_into_base() -> None:
    cache = LocalStateCache(_items(1))
    token = cache.apply_optimistic(UpdateItem(kind=MutationKind.MOVE, target_id=1, x=99, y=98))

    cache.settle(token, keep=True)

    assert cache.base[0].x == 99
    assert cache.snapshot() == cache.base
    assert cache.pending == 0


def test_settle_unknown_token_is_ignored() -> None:
    cache = LocalStateCache(_items(1))
    cache.settle(12345)
    assert cache.snapshot() == _items(1)


def test_next_item_id_ignores_gaps() -> None:
    assert next_item_id(_items(1, 5, 3)) == 6
    assert next_item_id(()) == 1


def test_add_rebase_keeps_identical_item_already_present() -> None:
    item = Item(id=1, x=10, y=20)
    mutation = AddItem(item=item)
    remote = (item, Item(id=2, x=1, y=1))

    rebased = mutation.rebase(remote)

    assert rebased.apply(remote) == remote
    assert rebased.pick(remote) == item


def test_add_rebase_renumbers_on_conflicting_id() -> None:
    mutation = AddItem(item=Item(id=1, x=10, y=20, name="mine"))
    remote = (Item(id=1, x=0, y=0, name="theirs"), Item(id=4, x=0, y=0))

    rebased = mutation.rebase(remote)
    merged = rebased.apply(remote)

    assert [item.id for item in merged] == [1, 4, 5]
    assert merged[-1].name == "mine"
    assert rebased.pick(merged) == merged[-1]


def test_update_on_missing_id_is_noop() -> None:
    items = _items(1, 2)
    assert UpdateItem(target_id=9, name="x").apply(items) == items


def test_update_changes_only_given_fields() -> None:
    (item,) = UpdateItem(target_id=1, x=3).apply(_items(1))
    assert item.x == 3
    assert item.y == 20
    assert item.name == "c1"


def test_remove_is_idempotent() -> None:
    items = _items(1, 2)
    once = RemoveItem(target_id=2).apply(items)
    assert RemoveItem(target_id=2).apply(once) == once
    assert RemoveItem(target_id=2).pick(once) is None
