"""Generated bus offers."""

from __future__ import annotations

import logging
import random

from wayfare_core.schemas import BusOffer, BusQuery

from ._mock import or_today, pick_departure
from .base import BaseProvider

logger = logging.getLogger(__name__)

_OPERATORS = [
    "RedBus",
    "Volvo",
    "SRS Travels",
    "KPN Travels",
    "Orange Travels",
    "Parveen Travels",
    "Neeta Travels",
    "Kallada Travels",
    "VRL Travels",
    "Sharma Travels",
]
_BUS_TYPES = ["Sleeper", "Semi-Sleeper", "AC Sleeper", "Non-AC", "Volvo Multi-Axle"]
_TIMES = ["08:00", "10:30", "14:00", "18:30", "22:00", "23:30"]
_AMENITIES = [
    ["WiFi", "AC", "Charging Point"],
    ["AC", "Reclining Seats", "Water"],
    ["WiFi", "AC", "Blanket", "Charging Point"],
    ["AC", "Snacks"],
    ["WiFi", "AC", "Entertainment", "Charging Point", "Blanket"],
]
_RESULT_COUNT = 12


class MockBusProvider(BaseProvider):
    """Bus provider returning randomized but plausible departures."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def search(self, query: BusQuery) -> list[BusOffer]:
        logger.info("Generating buses from %s to %s", query.origin, query.destination)
        rng = self._rng
        departure_date = or_today(query.departure_date)
        offers = []
        for i in range(_RESULT_COUNT):
            departure, arrival, hours = pick_departure(rng, _TIMES, 6, 7)
            offers.append(
                BusOffer(
                    id=f"mock_bus_{i}",
                    operator=rng.choice(_OPERATORS),
                    bus_number=str(rng.randint(1000, 9999)),
                    bus_type=rng.choice(_BUS_TYPES),
                    origin=query.origin or "Delhi",
                    destination=query.destination or "Mumbai",
                    departure_date=departure_date,
                    departure_time=departure,
                    arrival_time=arrival,
                    duration=f"{hours}h {rng.randint(0, 59)}m",
                    price=rng.randint(800, 2799) * query.adults,
                    seats_available=rng.randint(5, 24),
                    amenities=list(rng.choice(_AMENITIES)),
                )
            )
        return offers
