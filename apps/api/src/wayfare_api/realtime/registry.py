"""In-process table of searches being refreshed for subscribed clients."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from wayfare_core.schemas import ActiveSearch, SearchType

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import timedelta

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class ActiveSearchRegistry:
    """Owns every :class:`ActiveSearch` of the running process.

    Entries are immutable and replaced whole, so an update to one id never
    touches another.  The lock only guards the table itself.
    """

    def __init__(self, clock: Callable[[], datetime] = _now) -> None:
        self._clock = clock
        self._entries: dict[str, ActiveSearch] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, search_id: object) -> bool:
        return search_id in self._entries

    def register(
        self, search_id: str, search_type: SearchType, params: Mapping[str, Any]
    ) -> ActiveSearch:
        """Insert or overwrite the entry for *search_id*."""
        now = self._clock()
        entry = ActiveSearch(
            id=search_id,
            type=SearchType(search_type),
            params=dict(params),
            created_at=now,
            last_refresh=now,
            last_seen=now,
        )
        with self._lock:
            self._entries[search_id] = entry
        logger.info("Search registered for price updates: %s", search_id)
        return entry

    def get(self, search_id: str) -> ActiveSearch | None:
        return self._entries.get(search_id)

    def unregister(self, search_id: str) -> bool:
        """Remove *search_id*; returns False when it was not registered."""
        with self._lock:
            removed = self._entries.pop(search_id, None)
        if removed is not None:
            logger.info("Search unregistered: %s", search_id)
        return removed is not None

    def list_all(self) -> list[ActiveSearch]:
        """Snapshot of every entry, safe to iterate while the table changes."""
        with self._lock:
            return list(self._entries.values())

    def record_refresh(
        self,
        search_id: str,
        results: list[dict[str, Any]],
        refreshed_at: datetime | None = None,
    ) -> ActiveSearch | None:
        """Store fresh results for an existing entry.

        Returns ``None`` without creating anything if the search was
        unregistered while its refresh was in flight.
        """
        with self._lock:
            current = self._entries.get(search_id)
            if current is None:
                return None
            updated = current.model_copy(
                update={
                    "results": results,
                    "last_refresh": refreshed_at or self._clock(),
                }
            )
            self._entries[search_id] = updated
        return updated

    def touch(self, search_id: str) -> bool:
        """Mark *search_id* as still wanted by a client."""
        with self._lock:
            current = self._entries.get(search_id)
            if current is None:
                return False
            self._entries[search_id] = current.model_copy(
                update={"last_seen": self._clock()}
            )
        return True

    def evict_idle(
        self,
        max_idle: timedelta,
        keep: Callable[[str], bool] = lambda _search_id: False,
    ) -> list[str]:
        """Drop entries unseen for longer than *max_idle*, unless *keep* holds them."""
        cutoff = self._clock() - max_idle
        with self._lock:
            stale = [
                search_id
                for search_id, entry in self._entries.items()
                if entry.last_seen < cutoff and not keep(search_id)
            ]
            for search_id in stale:
                del self._entries[search_id]
        if stale:
            logger.info("Evicted %d idle search(es): %s", len(stale), ", ".join(stale))
        return stale
