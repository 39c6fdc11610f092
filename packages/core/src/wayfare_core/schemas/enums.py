"""Pydantic-compatible enums shared by the API and providers."""

from enum import StrEnum


class SearchType(StrEnum):
    """Kind of travel item a search targets."""

    FLIGHTS = "flights"
    HOTELS = "hotels"
    BUSES = "buses"


class CacheStatus(StrEnum):
    """Whether a response was served from the cache."""

    HIT = "HIT"
    MISS = "MISS"


class SchedulerState(StrEnum):
    """Lifecycle state of the price refresh scheduler."""

    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
