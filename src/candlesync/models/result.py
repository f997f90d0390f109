"""Mutation outcome model."""

from __future__ import annotations

from enum import StrEnum

from candlesync.models._base import SyncBaseModel
from candlesync.models.item import Item


class MutationKind(StrEnum):
    ADD = "add"
    RENAME = "rename"
    MOVE = "move"
    UPDATE = "update"
    REMOVE = "remove"


class MutationResult(SyncBaseModel):
    """What happened to one mutation.

    Parameters
    ----------
    success : bool
        Whether the change was persisted to the store.
    kind : MutationKind
        Which operation this result belongs to.
    item : Item or None
        The affected item as persisted (on success) or as optimistically
        applied (on failure). ``None`` for removals and for updates of an id
        that does not exist.
    error : str or None
        Human-readable failure description.
    rolled_back : bool
        Local state was reset to a fresh copy of the remote document.
    stale : bool
        The rollback refetch failed too; the optimistic change is still
        shown locally and may not match the store.
    revision : str or None
        Revision marker after the write, when known.
    """

    success: bool
    kind: MutationKind
    item: Item | None = None
    error: str | None = None
    rolled_back: bool = False
    stale: bool = False
    revision: str | None = None
