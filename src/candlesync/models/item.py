"""Item model: one memorial candle."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, StrictFloat, StrictInt, StrictStr

from candlesync.models._base import SyncBaseModel


class Item(SyncBaseModel):
    """One entry of the shared collection.

    Parameters
    ----------
    id : int
        Unique within a collection, assigned as ``max(existing ids) + 1``
        by the client that created the item.
    x : int or float
        Horizontal position.
    y : int or float
        Vertical position.
    name : str
        Label, may be empty.

    Keys written by other clients that this model does not know about are
    kept, so a read-modify-write never strips them.
    """

    model_config = ConfigDict(extra="allow")

    id: StrictInt
    x: StrictInt | StrictFloat
    y: StrictInt | StrictFloat
    name: StrictStr = ""

    def with_changes(self, **changes: Any) -> Item:
        """Return a validated copy with *changes* applied."""
        data = self.model_dump()
        data.update(changes)
        return Item.model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
