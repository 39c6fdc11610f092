"""Dispatch searches to the provider for their type."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from wayfare_core.schemas import BusQuery, FlightQuery, HotelQuery, SearchType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wayfare_api.providers import BaseProvider

logger = logging.getLogger(__name__)


class InvalidSearchError(ValueError):
    """Search type or parameters rejected before any cache or provider call."""


def parse_search_type(value: str) -> SearchType:
    """Map a raw ``type`` value onto :class:`SearchType`."""
    try:
        return SearchType(value.lower())
    except ValueError:
        msg = "Invalid type. Must be flights, hotels, or buses"
        raise InvalidSearchError(msg) from None


def _first(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = params.get(name)
        if value not in (None, ""):
            return value
    return None


class SearchExecutor:
    """Routes each search to exactly one provider.

    :meth:`run` propagates provider failures; :meth:`execute` logs them and
    returns an empty result so a combined search can still answer with the
    other types.
    """

    def __init__(
        self,
        providers: Mapping[SearchType, BaseProvider],
        *,
        default_adults: int = 1,
    ) -> None:
        self._providers = dict(providers)
        self._default_adults = default_adults

    def normalize(
        self, search_type: SearchType | str, params: Mapping[str, Any]
    ) -> BaseModel:
        """Translate loose request parameters into the provider's query model."""
        kind = parse_search_type(str(search_type))
        adults = _first(params, "adults")
        if adults is None:
            adults = self._default_adults
        try:
            if kind is SearchType.FLIGHTS:
                return FlightQuery(
                    origin=_first(params, "from"),
                    destination=_first(params, "to"),
                    departure_date=_first(params, "date", "departureDate"),
                    return_date=_first(params, "returnDate"),
                    adults=adults,
                )
            if kind is SearchType.HOTELS:
                return HotelQuery(
                    city_code=_first(params, "city", "to"),
                    check_in_date=_first(params, "checkInDate", "date"),
                    check_out_date=_first(params, "checkOutDate", "returnDate"),
                    adults=adults,
                )
            return BusQuery(
                origin=_first(params, "from"),
                destination=_first(params, "to"),
                departure_date=_first(params, "date", "departureDate"),
                adults=adults,
            )
        except ValidationError as exc:
            msg = f"Invalid {kind} search parameters: {_describe(exc)}"
            raise InvalidSearchError(msg) from exc

    async def run(
        self, search_type: SearchType | str, params: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Search and return JSON-ready result items; provider errors propagate."""
        kind = parse_search_type(str(search_type))
        query = self.normalize(kind, params)
        return await self._dispatch(kind, query)

    async def execute(
        self, search_type: SearchType | str, params: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Like :meth:`run`, but a failing provider yields an empty list."""
        kind = parse_search_type(str(search_type))
        query = self.normalize(kind, params)
        try:
            return await self._dispatch(kind, query)
        except Exception:
            logger.exception(
                "%s search failed, returning no results", kind.capitalize()
            )
            return []

    async def _dispatch(
        self, kind: SearchType, query: BaseModel
    ) -> list[dict[str, Any]]:
        provider = self._providers.get(kind)
        if provider is None:
            msg = f"No provider configured for {kind}"
            raise LookupError(msg)
        items = await provider.search(query)
        return [item.model_dump(mode="json") for item in items]

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'params'}: {err['msg']}"
        for err in exc.errors()
    )


def next_day(value: str | None) -> str | None:
    """ISO date one day after *value*, used as the default hotel check-out."""
    if not value:
        return None
    try:
        return (date.fromisoformat(value) + timedelta(days=1)).isoformat()
    except ValueError:
        return None
