"""Re-run tracked searches and write the fresh results back to the cache."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from wayfare_api.cache.cache_keys import search_key
from wayfare_core.schemas import PriceUpdate

if TYPE_CHECKING:
    from wayfare_api.cache.redis_client import CacheStore
    from wayfare_api.realtime.registry import ActiveSearchRegistry
    from wayfare_api.services.search_executor import SearchExecutor
    from wayfare_core.schemas import ActiveSearch

logger = logging.getLogger(__name__)


class PriceRefreshService:
    """Refreshes active searches one by one or all at once."""

    def __init__(
        self,
        registry: ActiveSearchRegistry,
        executor: SearchExecutor,
        store: CacheStore,
        *,
        ttl: int = 60,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._store = store
        self._ttl = ttl

    async def refresh_search(self, search: ActiveSearch) -> PriceUpdate | None:
        """Refresh one search; provider errors propagate to the caller.

        Returns ``None`` when the search was unregistered while the provider
        call was in flight, in which case nobody is notified.
        """
        results = await self._executor.run(search.type, search.params)
        refreshed_at = datetime.now(UTC)
        key = search_key(search.type, search.params)
        await self._store.set(key, results, self._ttl)

        if self._registry.record_refresh(search.id, results, refreshed_at) is None:
            logger.info(
                "Search %s was unregistered mid-refresh, update dropped", search.id
            )
            return None
        return PriceUpdate(
            search_id=search.id,
            type=search.type,
            params=search.params,
            results=results,
            timestamp=refreshed_at,
        )

    async def refresh_all(self, searches: list[ActiveSearch]) -> list[PriceUpdate]:
        """Refresh *searches* concurrently and keep only the successes."""
        outcomes = await asyncio.gather(
            *(self.refresh_search(search) for search in searches),
            return_exceptions=True,
        )
        updates: list[PriceUpdate] = []
        for search, outcome in zip(searches, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.error("Error refreshing search %s: %s", search.id, outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is not None:
                updates.append(outcome)
        return updates
