"""Core schemas for Wayfare."""

from .enums import CacheStatus, SchedulerState, SearchType
from .offers import BusOffer, FlightOffer, HotelOffer
from .queries import BusQuery, FlightQuery, HotelQuery
from .tracking import ActiveSearch, PriceUpdate

__all__ = [
    "ActiveSearch",
    "BusOffer",
    "BusQuery",
    "CacheStatus",
    "FlightOffer",
    "FlightQuery",
    "HotelOffer",
    "HotelQuery",
    "PriceUpdate",
    "SchedulerState",
    "SearchType",
]
