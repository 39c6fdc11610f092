"""Search request / response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wayfare_core.schemas import ActiveSearch, CacheStatus, SchedulerState, SearchType


class SearchFilters(BaseModel):
    """Echo of the combined search query."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "all"
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    city: str | None = None
    date: str | None = None


class SearchCount(BaseModel):
    total: int
    hotels: int
    flights: int
    buses: int


class SearchData(BaseModel):
    """Results grouped by search type."""

    hotels: list[dict[str, Any]] = Field(default_factory=list)
    flights: list[dict[str, Any]] = Field(default_factory=list)
    buses: list[dict[str, Any]] = Field(default_factory=list)

    def count(self) -> SearchCount:
        return SearchCount(
            total=len(self.hotels) + len(self.flights) + len(self.buses),
            hotels=len(self.hotels),
            flights=len(self.flights),
            buses=len(self.buses),
        )


class CombinedSearchResponse(BaseModel):
    """Envelope of the combined search endpoint.

    ``_cacheStatus`` is never part of the cached document; it is attached to
    each response on the way out.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Search completed successfully"
    filters: SearchFilters
    count: SearchCount
    data: SearchData
    cache_status: CacheStatus | None = Field(default=None, alias="_cacheStatus")


class TrackedSearchResponse(BaseModel):
    """Single-type search registered for price refresh."""

    success: bool = True
    message: str
    search_id: str
    type: SearchType
    params: dict[str, Any]
    data: list[dict[str, Any]]
    cached: bool
    timestamp: datetime


class TrackedSearchAllResponse(BaseModel):
    """Multi-type search, one tracked search id per type that ran."""

    success: bool = True
    message: str = "Search completed"
    search_ids: dict[SearchType, str]
    data: SearchData
    timestamp: datetime


class SearchStatusResponse(BaseModel):
    success: bool = True
    search: ActiveSearch


class StopTrackingResponse(BaseModel):
    success: bool = True
    message: str = "Tracking stopped"
    search_id: str


class SchedulerStatus(BaseModel):
    state: SchedulerState
    running: bool
    interval_ms: int
    active_searches: int
