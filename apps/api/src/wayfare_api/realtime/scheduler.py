"""Periodic price refresh as a cancellable asyncio worker."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from wayfare_api.schemas.search import SchedulerStatus
from wayfare_core.schemas import SchedulerState

if TYPE_CHECKING:
    from wayfare_api.realtime.broadcaster import UpdateBroadcaster
    from wayfare_api.realtime.registry import ActiveSearchRegistry
    from wayfare_api.services.price_refresh_service import PriceRefreshService

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Re-runs every active search once per interval and pushes the results.

    Ticks never overlap: the next interval starts counting only after the
    current tick has finished, and a manual :meth:`tick` issued while one is
    running is skipped.
    """

    def __init__(
        self,
        registry: ActiveSearchRegistry,
        refresher: PriceRefreshService,
        broadcaster: UpdateBroadcaster,
        *,
        interval_ms: int = 30_000,
        idle_timeout: float = 0,
        stop_timeout: float = 5.0,
    ) -> None:
        self._registry = registry
        self._refresher = refresher
        self._broadcaster = broadcaster
        self._interval_ms = interval_ms
        self._idle_timeout = idle_timeout
        self._stop_timeout = stop_timeout
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._tick_lock = asyncio.Lock()

    @property
    def state(self) -> SchedulerState:
        if self._task is not None and not self._task.done():
            return SchedulerState.RUNNING
        return SchedulerState.STOPPED

    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def start(self) -> None:
        """Start ticking; does nothing if already running."""
        if self.running:
            logger.warning("Scheduler already running")
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._loop(self._stop_event), name="price-refresh-scheduler"
        )
        logger.info(
            "Starting price refresh scheduler (interval: %dms)", self._interval_ms
        )

    async def stop(self) -> None:
        """Stop ticking; an in-flight tick gets ``stop_timeout`` seconds to finish."""
        task = self._task
        if task is None:
            return
        self._task = None
        self._stop_event.set()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=self._stop_timeout)
        except TimeoutError:
            logger.warning(
                "Refresh tick still running after %.1fs, cancelling", self._stop_timeout
            )
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Price refresh scheduler stopped")

    async def tick(self) -> int:
        """Refresh every active search once; returns how many were refreshed."""
        if self._tick_lock.locked():
            logger.warning("Previous refresh tick still running, skipping")
            return 0
        async with self._tick_lock:
            self._evict_idle()
            searches = self._registry.list_all()
            if not searches:
                return 0

            logger.info("Refreshing prices for %d active search(es)", len(searches))
            updates = await self._refresher.refresh_all(searches)
            await asyncio.gather(
                *(
                    self._broadcaster.publish(
                        update.search_id, update.model_dump(mode="json")
                    )
                    for update in updates
                )
            )
            logger.info("Refreshed %d search(es)", len(updates))
            return len(updates)

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            state=self.state,
            running=self.running,
            interval_ms=self._interval_ms,
            active_searches=len(self._registry),
        )

    async def _loop(self, stop_event: asyncio.Event) -> None:
        # One event per loop: a start() during stop() must not replace it.
        interval = self._interval_ms / 1000
        while True:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except TimeoutError:
                pass
            else:
                return
            try:
                await self.tick()
            except Exception:
                logger.exception("Scheduler tick failed")

    def _evict_idle(self) -> None:
        if self._idle_timeout <= 0:
            return
        self._registry.evict_idle(
            timedelta(seconds=self._idle_timeout),
            keep=lambda search_id: self._broadcaster.subscriber_count(search_id) > 0,
        )
