"""Upstream travel providers, one per search type."""

from __future__ import annotations

from wayfare_core.schemas import SearchType

from .base import BaseProvider
from .buses import MockBusProvider
from .flights import MockFlightProvider
from .hotels import MockHotelProvider


def default_providers() -> dict[SearchType, BaseProvider]:
    """Build the provider table used when none is injected."""
    return {
        SearchType.FLIGHTS: MockFlightProvider(),
        SearchType.HOTELS: MockHotelProvider(),
        SearchType.BUSES: MockBusProvider(),
    }


__all__ = [
    "BaseProvider",
    "MockBusProvider",
    "MockFlightProvider",
    "MockHotelProvider",
    "default_providers",
]
