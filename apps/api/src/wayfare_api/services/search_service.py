"""Cache-aside search orchestration."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from wayfare_api.cache.cache_keys import legacy_search_key, search_item_key, search_key
from wayfare_api.schemas.search import CombinedSearchResponse, SearchData, SearchFilters
from wayfare_api.services.catalog_service import singular
from wayfare_api.services.search_executor import (
    InvalidSearchError,
    next_day,
    parse_search_type,
)
from wayfare_core.schemas import CacheStatus, SearchType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wayfare_api.cache.redis_client import CacheStore
    from wayfare_api.services.catalog_service import CatalogService
    from wayfare_api.services.search_executor import SearchExecutor

logger = logging.getLogger(__name__)

_ITEM_TYPE_ALIASES: dict[str, SearchType] = {
    "hotels": SearchType.HOTELS,
    "hotel": SearchType.HOTELS,
    "flights": SearchType.FLIGHTS,
    "flight": SearchType.FLIGHTS,
    "buses": SearchType.BUSES,
    "bus": SearchType.BUSES,
}


class SearchService:
    """Checks the cache, falls back to the executor, and writes back on miss.

    Hits are returned as stored and never extend the entry's TTL.  Two
    concurrent misses on one key may both reach the providers; the later
    write wins.
    """

    def __init__(
        self,
        store: CacheStore,
        executor: SearchExecutor,
        catalog: CatalogService,
        *,
        search_ttl: int = 60,
        reference_ttl: int = 3600,
    ) -> None:
        self._store = store
        self._executor = executor
        self._catalog = catalog
        self._search_ttl = search_ttl
        self._reference_ttl = reference_ttl

    def validate(
        self, search_type: SearchType | str, params: Mapping[str, Any]
    ) -> SearchType:
        """Reject a bad type or bad parameters without touching cache or providers."""
        kind = parse_search_type(str(search_type))
        self._executor.normalize(kind, params)
        return kind

    async def search(
        self, search_type: SearchType | str, params: Mapping[str, Any]
    ) -> tuple[list[dict[str, Any]], CacheStatus]:
        """Run one typed search through the cache."""
        kind = self.validate(search_type, params)

        key = search_key(kind, params)
        cached = await self._store.get(key)
        if cached is not None:
            logger.info("CACHE HIT: %s", key)
            return cached, CacheStatus.HIT

        logger.info("CACHE MISS: %s", key)
        results = await self._executor.execute(kind, params)
        if await self._store.set(key, results, self._search_ttl):
            logger.info("CACHE SET: %s (TTL: %ss)", key, self._search_ttl)
        return results, CacheStatus.MISS

    async def search_combined(
        self,
        search_type: str = "all",
        *,
        from_: str | None = None,
        to: str | None = None,
        city: str | None = None,
        date: str | None = None,
        adults: int | None = None,
    ) -> CombinedSearchResponse:
        """Search one type or all of them behind the positional cache key."""
        if search_type == "all":
            kinds = list(SearchType)
        else:
            kinds = [parse_search_type(search_type)]

        plans = {
            kind: self._plan(kind, from_, to, city, date, adults) for kind in kinds
        }
        for kind, provider_params in plans.items():
            if provider_params is not None:
                self.validate(kind, provider_params)

        key = legacy_search_key(search_type, from_, to, city, date)
        cached = await self._store.get(key)
        if cached is not None:
            logger.info("CACHE HIT: %s", key)
            response = CombinedSearchResponse.model_validate(cached)
            return response.model_copy(update={"cache_status": CacheStatus.HIT})

        logger.info("CACHE MISS: %s", key)
        found = await asyncio.gather(
            *(
                self._search_one(kind, provider_params, from_, to, city, date)
                for kind, provider_params in plans.items()
            )
        )
        data = SearchData(
            **{kind.value: items for kind, items in zip(plans, found, strict=True)}
        )
        response = CombinedSearchResponse(
            filters=SearchFilters(
                type=search_type, from_=from_, to=to, city=city, date=date
            ),
            count=data.count(),
            data=data,
        )
        logger.info(
            "Search results count: hotels=%d flights=%d buses=%d",
            response.count.hotels,
            response.count.flights,
            response.count.buses,
        )

        payload = response.model_dump(
            mode="json", by_alias=True, exclude={"cache_status"}
        )
        if await self._store.set(key, payload, self._search_ttl):
            logger.info("CACHE SET: %s (TTL: %ss)", key, self._search_ttl)
        return response.model_copy(update={"cache_status": CacheStatus.MISS})

    async def get_search_item(
        self, item_type: str, item_id: str
    ) -> dict[str, Any] | None:
        """Look one catalog item up by id through the long-lived search cache."""
        kind = _ITEM_TYPE_ALIASES.get(item_type.lower())
        if kind is None:
            msg = "Invalid type. Use hotels, flights, or buses"
            raise InvalidSearchError(msg)

        key = search_item_key(kind, item_id)
        cached = await self._store.get(key)
        if cached is not None:
            return cached

        item = await self._catalog.fetch(kind, item_id)
        if item is None:
            return None
        response = {"success": True, "data": {"type": kind.value, singular(kind): item}}
        await self._store.set(key, response, self._reference_ttl)
        return response

    def _plan(
        self,
        kind: SearchType,
        from_: str | None,
        to: str | None,
        city: str | None,
        date: str | None,
        adults: int | None,
    ) -> dict[str, Any] | None:
        """Provider parameters for *kind*, or ``None`` to list the catalog instead."""
        if kind is SearchType.HOTELS:
            if not city:
                return None
            params = {
                "city": city,
                "checkInDate": date,
                "checkOutDate": next_day(date),
                "adults": adults,
            }
        else:
            if not (from_ and to):
                return None
            params = {"from": from_, "to": to, "date": date, "adults": adults}
        return {name: value for name, value in params.items() if value is not None}

    async def _search_one(
        self,
        kind: SearchType,
        provider_params: dict[str, Any] | None,
        from_: str | None,
        to: str | None,
        city: str | None,
        date: str | None,
    ) -> list[dict[str, Any]]:
        if provider_params is not None:
            results = await self._executor.execute(kind, provider_params)
            logger.info("Found %d %s", len(results), kind)
            return results
        if kind is SearchType.HOTELS:
            return await self._catalog.find(kind, city=city)
        return await self._catalog.find(kind, from_=from_, to=to, date_from=date)
