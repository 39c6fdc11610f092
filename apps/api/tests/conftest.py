"""Shared fixtures and helpers for the API tests."""

from __future__ import annotations

import asyncio
import fnmatch
import random
from typing import TYPE_CHECKING, Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from wayfare_api.cache.redis_client import CacheStore
from wayfare_api.providers import (
    BaseProvider,
    MockBusProvider,
    MockFlightProvider,
    MockHotelProvider,
)
from wayfare_api.realtime.broadcaster import UpdateBroadcaster
from wayfare_api.realtime.registry import ActiveSearchRegistry
from wayfare_api.services.catalog_service import (
    CatalogService,
    InMemoryCatalogRepository,
)
from wayfare_api.services.search_executor import SearchExecutor
from wayfare_api.services.search_service import SearchService
from wayfare_core.schemas import SearchType

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """In-memory stand-in for the subset of ``redis.asyncio.Redis`` the store uses."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self.down = False
        self.closed = False

    def _check(self) -> None:
        if self.down:
            msg = "Connection refused"
            raise RedisConnectionError(msg)

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self._live(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        expires_at = self._clock() + ex if ex is not None else None
        self._data[key] = (value, expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        return sum(self._data.pop(key, None) is not None for key in keys)

    async def scan_iter(self, match: str = "*") -> AsyncIterator[str]:
        self._check()
        for key in list(self._data):
            if self._live(key) is not None and fnmatch.fnmatchcase(key, match):
                yield key

    async def flushdb(self) -> bool:
        self._check()
        self._data.clear()
        return True

    async def ttl(self, key: str) -> int:
        self._check()
        if self._live(key) is None:
            return -2
        expires_at = self._data[key][1]
        if expires_at is None:
            return -1
        return int(expires_at - self._clock())

    async def aclose(self) -> None:
        self.closed = True


class FailingProvider(BaseProvider):
    """Provider whose every search raises."""

    def __init__(self) -> None:
        self.calls = 0

    async def search(self, query: Any) -> list:
        self.calls += 1
        msg = "upstream timeout"
        raise TimeoutError(msg)


class CountingProvider(BaseProvider):
    """Wraps a provider and counts the searches it serves."""

    def __init__(self, inner: BaseProvider) -> None:
        self.inner = inner
        self.calls = 0
        self.queries: list[Any] = []

    async def search(self, query: Any) -> list:
        self.calls += 1
        self.queries.append(query)
        return await self.inner.search(query)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def store(fake_redis: FakeRedis) -> CacheStore:
    return CacheStore(fake_redis)


@pytest.fixture
def providers() -> dict[SearchType, CountingProvider]:
    rng = random.Random(42)
    return {
        SearchType.FLIGHTS: CountingProvider(MockFlightProvider(rng)),
        SearchType.HOTELS: CountingProvider(MockHotelProvider(rng)),
        SearchType.BUSES: CountingProvider(MockBusProvider(rng)),
    }


@pytest.fixture
def executor(providers: dict[SearchType, CountingProvider]) -> SearchExecutor:
    return SearchExecutor(providers)


@pytest.fixture
def catalog_repo() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def catalog(
    catalog_repo: InMemoryCatalogRepository, store: CacheStore
) -> CatalogService:
    return CatalogService(catalog_repo, store, ttl=3600)


@pytest.fixture
def search_service(
    store: CacheStore, executor: SearchExecutor, catalog: CatalogService
) -> SearchService:
    return SearchService(store, executor, catalog, search_ttl=60, reference_ttl=3600)


@pytest.fixture
def registry() -> ActiveSearchRegistry:
    return ActiveSearchRegistry()


@pytest.fixture
def broadcaster() -> UpdateBroadcaster:
    return UpdateBroadcaster()


class RecordingSubscriber:
    """Broadcaster subscriber that keeps what it receives."""

    def __init__(self, *, fail: bool = False) -> None:
        self.received: list[dict[str, Any]] = []
        self.fail = fail

    async def send(self, payload: dict[str, Any]) -> None:
        if self.fail:
            msg = "socket closed"
            raise ConnectionResetError(msg)
        self.received.append(payload)


class StalledSubscriber:
    """Subscriber whose send never completes, like a client that stopped reading."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send(self, payload: dict[str, Any]) -> None:
        self.attempts += 1
        await asyncio.Event().wait()
