"""Cached catalog reads and write-through cache invalidation.

Catalog persistence belongs to the CRUD layer; this module only needs the
small :class:`CatalogRepository` surface.  Every write drops the cache keys
that could still describe the old state of the item.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

from wayfare_api.cache.cache_keys import (
    item_key,
    listing_key,
    search_item_key,
    type_pattern,
)

if TYPE_CHECKING:
    from wayfare_api.cache.redis_client import CacheStore
    from wayfare_core.schemas import SearchType

logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    """Storage surface consumed by the cache layer."""

    async def list_all(self, item_type: SearchType) -> list[dict[str, Any]]: ...

    async def get(
        self, item_type: SearchType, item_id: str
    ) -> dict[str, Any] | None: ...

    async def put(
        self, item_type: SearchType, item: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def delete(self, item_type: SearchType, item_id: str) -> bool: ...


class InMemoryCatalogRepository:
    """Dict-backed repository, used when no external catalog is wired in."""

    def __init__(self) -> None:
        self._items: dict[str, dict[str, dict[str, Any]]] = {}

    async def list_all(self, item_type: SearchType) -> list[dict[str, Any]]:
        return [dict(item) for item in self._items.get(item_type, {}).values()]

    async def get(self, item_type: SearchType, item_id: str) -> dict[str, Any] | None:
        item = self._items.get(item_type, {}).get(item_id)
        return dict(item) if item is not None else None

    async def put(self, item_type: SearchType, item: dict[str, Any]) -> dict[str, Any]:
        self._items.setdefault(item_type, {})[item["id"]] = dict(item)
        return dict(item)

    async def delete(self, item_type: SearchType, item_id: str) -> bool:
        return self._items.get(item_type, {}).pop(item_id, None) is not None


class CatalogService:
    """Long-TTL cached reads over the catalog, invalidated on every write."""

    def __init__(
        self,
        repository: CatalogRepository,
        store: CacheStore,
        *,
        ttl: int = 3600,
    ) -> None:
        self._repo = repository
        self._store = store
        self._ttl = ttl

    async def list_items(self, item_type: SearchType) -> dict[str, Any]:
        key = listing_key(item_type)
        cached = await self._store.get(key)
        if cached is not None:
            return cached

        items = await self._repo.list_all(item_type)
        response = {
            "success": True,
            "count": len(items),
            "data": {item_type.value: items},
        }
        await self._store.set(key, response, self._ttl)
        return response

    async def get_item(
        self, item_type: SearchType, item_id: str
    ) -> dict[str, Any] | None:
        """Return the item envelope, or ``None`` if the catalog has no such id."""
        key = item_key(item_type, item_id)
        cached = await self._store.get(key)
        if cached is not None:
            return cached

        item = await self._repo.get(item_type, item_id)
        if item is None:
            return None
        response = {"success": True, "data": {singular(item_type): item}}
        await self._store.set(key, response, self._ttl)
        return response

    async def fetch(self, item_type: SearchType, item_id: str) -> dict[str, Any] | None:
        """Read one item straight from the repository, bypassing the cache."""
        return await self._repo.get(item_type, item_id)

    async def find(
        self,
        item_type: SearchType,
        *,
        from_: str | None = None,
        to: str | None = None,
        city: str | None = None,
        date_from: str | None = None,
    ) -> list[dict[str, Any]]:
        """Filter the catalog the way the combined search falls back to it."""
        items = await self._repo.list_all(item_type)
        if city:
            items = [
                i for i in items
                if _contains(i.get("city"), city) or _contains(i.get("location"), city)
            ]
        if from_:
            items = [i for i in items if _contains(i.get("origin"), from_)]
        if to:
            items = [i for i in items if _contains(i.get("destination"), to)]
        if date_from:
            items = [
                i for i in items if _on_or_after(i.get("departure_date"), date_from)
            ]
        return items

    async def create_item(
        self, item_type: SearchType, data: dict[str, Any]
    ) -> dict[str, Any]:
        item = {**data, "id": str(data.get("id") or uuid.uuid4().hex)}
        saved = await self._repo.put(item_type, item)
        await self._store.delete_pattern(type_pattern(item_type))
        logger.info(
            "Created %s %s, cleared %s", item_type, saved["id"], type_pattern(item_type)
        )
        return saved

    async def update_item(
        self, item_type: SearchType, item_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        current = await self._repo.get(item_type, item_id)
        if current is None:
            return None
        saved = await self._repo.put(item_type, {**current, **changes, "id": item_id})
        await self.invalidate_item(item_type, item_id)
        return saved

    async def delete_item(self, item_type: SearchType, item_id: str) -> bool:
        removed = await self._repo.delete(item_type, item_id)
        if removed:
            await self.invalidate_item(item_type, item_id)
        return removed

    async def invalidate_item(self, item_type: SearchType, item_id: str) -> None:
        """Drop the id-keyed entries and the listing for one changed item."""
        for key in (
            item_key(item_type, item_id),
            listing_key(item_type),
            search_item_key(item_type, item_id),
        ):
            await self._store.delete(key)
        logger.info("Invalidated cache for %s %s", item_type, item_id)


def singular(item_type: SearchType) -> str:
    return "bus" if item_type.value == "buses" else item_type.value[:-1]


def _contains(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle.lower() in value.lower()


def _on_or_after(value: Any, threshold: str) -> bool:
    try:
        return date.fromisoformat(str(value)[:10]) >= date.fromisoformat(threshold)
    except ValueError:
        return False
