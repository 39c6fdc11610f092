"""Active search tracking and price update schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import SearchType


class ActiveSearch(BaseModel):
    """A search a client asked to keep refreshed.

    Instances are frozen; the registry swaps whole objects on every change.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: SearchType
    params: dict[str, Any]
    created_at: datetime
    last_refresh: datetime
    last_seen: datetime
    results: list[dict[str, Any]] = Field(default_factory=list)


class PriceUpdate(BaseModel):
    """Refreshed results pushed to the subscribers of one search."""

    search_id: str
    type: SearchType
    params: dict[str, Any]
    results: list[dict[str, Any]]
    cached: bool = False
    timestamp: datetime
