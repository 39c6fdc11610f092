"""FastAPI dependency injection providers.

Components are built once per process by the application lifespan and kept
on ``app.state``; these helpers hand them to routes and WebSocket handlers.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

from wayfare_api.realtime.broadcaster import UpdateBroadcaster
from wayfare_api.realtime.registry import ActiveSearchRegistry
from wayfare_api.realtime.scheduler import RefreshScheduler
from wayfare_api.services.catalog_service import CatalogService
from wayfare_api.services.search_service import SearchService


def get_search_service(conn: HTTPConnection) -> SearchService:
    return conn.app.state.search_service


def get_catalog_service(conn: HTTPConnection) -> CatalogService:
    return conn.app.state.catalog_service


def get_registry(conn: HTTPConnection) -> ActiveSearchRegistry:
    return conn.app.state.registry


def get_broadcaster(conn: HTTPConnection) -> UpdateBroadcaster:
    return conn.app.state.broadcaster


def get_scheduler(conn: HTTPConnection) -> RefreshScheduler:
    return conn.app.state.scheduler
