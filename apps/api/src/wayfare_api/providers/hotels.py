"""Generated hotel offers."""

from __future__ import annotations

import logging
import random

from wayfare_core.schemas import HotelOffer, HotelQuery

from ._mock import or_today
from .base import BaseProvider

logger = logging.getLogger(__name__)

_NAMES = [
    "Grand Hotel",
    "Royal Palace",
    "City View Inn",
    "Luxury Suites",
    "Comfort Stay",
    "Paradise Resort",
    "Sunset Hotel",
    "Ocean View",
    "Mountain Lodge",
    "Garden Plaza",
]
_AMENITIES = [
    ["WiFi", "Pool", "Gym"],
    ["WiFi", "Restaurant", "Spa"],
    ["WiFi", "Parking", "Breakfast"],
    ["WiFi", "Pool", "Restaurant", "Gym"],
    ["WiFi", "Spa", "Room Service"],
]
_RESULT_COUNT = 10


class MockHotelProvider(BaseProvider):
    """Hotel provider returning randomized but plausible offers."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def search(self, query: HotelQuery) -> list[HotelOffer]:
        logger.info("Generating hotels for %s", query.city_code)
        rng = self._rng
        check_in = or_today(query.check_in_date)
        check_out = query.check_out_date or check_in
        return [
            HotelOffer(
                id=f"mock_hotel_{i}",
                name=rng.choice(_NAMES),
                city=query.city_code or "Mumbai",
                location=f"{rng.randint(0, 99)} Main Street",
                price=rng.randint(2000, 4999) * query.nights * query.adults,
                rating=rng.randint(3, 5),
                amenities=list(rng.choice(_AMENITIES)),
                rooms_available=rng.randint(1, 5),
                check_in_date=check_in,
                check_out_date=check_out,
            )
            for i in range(_RESULT_COUNT)
        ]
