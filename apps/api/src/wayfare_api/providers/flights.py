"""Generated flight offers."""

from __future__ import annotations

import logging
import random

from wayfare_core.schemas import FlightOffer, FlightQuery

from ._mock import or_today, pick_departure
from .base import BaseProvider

logger = logging.getLogger(__name__)

_AIRLINES = ["IndiGo", "Air India", "SpiceJet", "Vistara", "GoAir"]
_TIMES = ["06:00", "09:30", "12:15", "15:45", "18:20", "21:00"]
_RESULT_COUNT = 10


class MockFlightProvider(BaseProvider):
    """Flight provider returning randomized but plausible offers."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def search(self, query: FlightQuery) -> list[FlightOffer]:
        logger.info("Generating flights from %s to %s", query.origin, query.destination)
        rng = self._rng
        departure_date = or_today(query.departure_date)
        offers = []
        for i in range(_RESULT_COUNT):
            departure, arrival, hours = pick_departure(rng, _TIMES, 2, 2)
            offers.append(
                FlightOffer(
                    id=f"mock_flight_{i}",
                    airline=rng.choice(_AIRLINES),
                    flight_number=str(rng.randint(1000, 9999)),
                    origin=query.origin or "DEL",
                    destination=query.destination or "BOM",
                    departure_date=departure_date,
                    departure_time=departure,
                    arrival_time=arrival,
                    duration=f"{hours}h {rng.randint(0, 59)}m",
                    price=rng.randint(3000, 7999) * query.adults,
                    seats_available=rng.randint(1, 10),
                )
            )
        return offers
