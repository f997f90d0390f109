"""Base model for candlesync data types.

Every model is frozen: snapshots handed to the presentation layer can be
shared freely without copying, and the only way to change state is through
the engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SyncBaseModel(BaseModel):
    """Frozen pydantic base shared by all candlesync models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )
