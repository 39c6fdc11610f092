"""Combined search router with positional cache keys."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wayfare_api.dependencies import get_search_service
from wayfare_api.schemas.search import CombinedSearchResponse
from wayfare_api.services.search_executor import InvalidSearchError
from wayfare_api.services.search_service import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

SearchDep = Annotated[SearchService, Depends(get_search_service)]


@router.get("", response_model=CombinedSearchResponse)
async def search_all(
    service: SearchDep,
    type_: Annotated[str, Query(alias="type")] = "all",
    from_: Annotated[str | None, Query(alias="from")] = None,
    to: str | None = None,
    city: str | None = None,
    date: str | None = None,
    adults: Annotated[int | None, Query(ge=1, le=9)] = None,
) -> CombinedSearchResponse:
    """Search hotels, flights and buses, or one of them, with a short-lived cache."""
    logger.info(
        "Search request: type=%s from=%s to=%s city=%s date=%s",
        type_,
        from_,
        to,
        city,
        date,
    )
    try:
        return await service.search_combined(
            type_, from_=from_, to=to, city=city, date=date, adults=adults
        )
    except InvalidSearchError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get("/{item_type}/{item_id}")
async def get_item_by_id(
    service: SearchDep, item_type: str, item_id: str
) -> dict[str, Any]:
    """Fetch one hotel, flight or bus by id."""
    try:
        response = await service.get_search_item(item_type, item_id)
    except InvalidSearchError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if response is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{item_type.capitalize()} not found",
        )
    return response
