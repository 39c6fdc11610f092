"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wayfare_api.cache.redis_client import CacheStore
from wayfare_api.config import ApiSettings, settings as default_settings
from wayfare_api.providers import default_providers
from wayfare_api.realtime.broadcaster import UpdateBroadcaster
from wayfare_api.realtime.registry import ActiveSearchRegistry
from wayfare_api.realtime.scheduler import RefreshScheduler
from wayfare_api.routers import catalog, realtime, search, ws
from wayfare_api.services.catalog_service import (
    CatalogService,
    InMemoryCatalogRepository,
)
from wayfare_api.services.price_refresh_service import PriceRefreshService
from wayfare_api.services.search_executor import SearchExecutor
from wayfare_api.services.search_service import SearchService

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping

    import redis.asyncio as redis

    from wayfare_api.providers import BaseProvider
    from wayfare_api.services.catalog_service import CatalogRepository
    from wayfare_core.schemas import SearchType

logger = logging.getLogger(__name__)


def create_app(
    app_settings: ApiSettings | None = None,
    *,
    redis_client: redis.Redis | None = None,
    providers: Mapping[SearchType, BaseProvider] | None = None,
    catalog_repository: CatalogRepository | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    The keyword arguments replace the default collaborators, mainly so tests
    can run without a Redis server or the generated-data providers.
    """
    cfg = app_settings or default_settings
    logging.getLogger("wayfare_api").setLevel(cfg.log_level.upper())

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Build one instance of every component, tear them down on shutdown."""
        if redis_client is not None:
            store = CacheStore(redis_client)
        else:
            store = await CacheStore.from_url(cfg.redis_url)
        executor = SearchExecutor(
            providers if providers is not None else default_providers(),
            default_adults=cfg.default_adults,
        )
        catalog_service = CatalogService(
            catalog_repository or InMemoryCatalogRepository(),
            store,
            ttl=cfg.reference_cache_ttl,
        )
        registry = ActiveSearchRegistry()
        broadcaster = UpdateBroadcaster(send_timeout=cfg.broadcast_send_timeout)
        scheduler = RefreshScheduler(
            registry,
            PriceRefreshService(registry, executor, store, ttl=cfg.search_cache_ttl),
            broadcaster,
            interval_ms=cfg.price_refresh_interval_ms,
            idle_timeout=cfg.active_search_idle_timeout,
            stop_timeout=cfg.scheduler_stop_timeout,
        )

        app.state.catalog_service = catalog_service
        app.state.search_service = SearchService(
            store,
            executor,
            catalog_service,
            search_ttl=cfg.search_cache_ttl,
            reference_ttl=cfg.reference_cache_ttl,
        )
        app.state.registry = registry
        app.state.broadcaster = broadcaster
        app.state.scheduler = scheduler

        if cfg.scheduler_autostart:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()
            await executor.close()
            await store.close()

    app = FastAPI(
        title="Wayfare Search API",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Fixed prefixes first: the catalog routes take any /{item_type}.
    _prefix = "/api"
    app.include_router(search.router, prefix=_prefix)
    app.include_router(realtime.router, prefix=_prefix)
    app.include_router(catalog.admin_router, prefix=_prefix)
    app.include_router(catalog.router, prefix=_prefix)
    app.include_router(ws.router)

    return app


app = create_app()
