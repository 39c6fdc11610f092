"""Normalized provider queries, one per search type."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, model_validator


class FlightQuery(BaseModel):
    """Flight search parameters in provider form."""

    origin: str | None = None
    destination: str | None = None
    departure_date: date | None = None
    return_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)

    @model_validator(mode="after")
    def _validate_dates(self) -> FlightQuery:
        if (
            self.return_date is not None
            and self.departure_date is not None
            and self.return_date < self.departure_date
        ):
            msg = "return_date must be after departure_date"
            raise ValueError(msg)
        return self


class HotelQuery(BaseModel):
    """Hotel search parameters in provider form."""

    city_code: str | None = None
    check_in_date: date | None = None
    check_out_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)

    @model_validator(mode="after")
    def _validate_stay(self) -> HotelQuery:
        if (
            self.check_in_date is not None
            and self.check_out_date is not None
            and self.check_out_date < self.check_in_date
        ):
            msg = "check_out_date must not be before check_in_date"
            raise ValueError(msg)
        return self

    @property
    def nights(self) -> int:
        """Length of stay, at least one night."""
        if self.check_in_date is None or self.check_out_date is None:
            return 1
        return max((self.check_out_date - self.check_in_date).days, 1)


class BusQuery(BaseModel):
    """Bus search parameters in provider form."""

    origin: str | None = None
    destination: str | None = None
    departure_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)
