"""Result items returned by the travel providers."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class FlightOffer(BaseModel):
    """One flight in a search result."""

    id: str
    airline: str
    flight_number: str
    origin: str
    destination: str
    departure_date: date
    departure_time: str
    arrival_time: str
    duration: str
    price: int = Field(ge=0)
    currency: str = "INR"
    seats_available: int = Field(ge=0)
    cabin: str = "ECONOMY"


class HotelOffer(BaseModel):
    """One hotel in a search result."""

    id: str
    name: str
    city: str
    location: str
    country: str = "IN"
    price: int = Field(ge=0)
    currency: str = "INR"
    rating: int = Field(ge=1, le=5)
    amenities: list[str] = Field(default_factory=list)
    rooms_available: int = Field(ge=0)
    check_in_date: date
    check_out_date: date


class BusOffer(BaseModel):
    """One bus departure in a search result."""

    id: str
    operator: str
    bus_number: str
    bus_type: str
    origin: str
    destination: str
    departure_date: date
    departure_time: str
    arrival_time: str
    duration: str
    price: int = Field(ge=0)
    currency: str = "INR"
    seats_available: int = Field(ge=0)
    amenities: list[str] = Field(default_factory=list)
