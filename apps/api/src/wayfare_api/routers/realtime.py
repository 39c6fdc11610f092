"""Searches tracked for background price refresh."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from wayfare_api.dependencies import (
    get_broadcaster,
    get_registry,
    get_scheduler,
    get_search_service,
)
from wayfare_api.realtime.broadcaster import UpdateBroadcaster
from wayfare_api.realtime.registry import ActiveSearchRegistry
from wayfare_api.realtime.scheduler import RefreshScheduler
from wayfare_api.schemas.search import (
    SchedulerStatus,
    SearchData,
    SearchStatusResponse,
    StopTrackingResponse,
    TrackedSearchAllResponse,
    TrackedSearchResponse,
)
from wayfare_api.services.search_executor import InvalidSearchError, parse_search_type
from wayfare_api.services.search_service import SearchService
from wayfare_core.schemas import CacheStatus, PriceUpdate, SearchType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])

SearchDep = Annotated[SearchService, Depends(get_search_service)]
RegistryDep = Annotated[ActiveSearchRegistry, Depends(get_registry)]
BroadcasterDep = Annotated[UpdateBroadcaster, Depends(get_broadcaster)]
SchedulerDep = Annotated[RefreshScheduler, Depends(get_scheduler)]
AdultsQuery = Annotated[int, Query(ge=1, le=9)]


def _search_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Search not found"
    )


def _compact(**params: Any) -> dict[str, Any]:
    return {name: value for name, value in params.items() if value not in (None, "")}


async def _search_and_track(
    service: SearchService,
    registry: ActiveSearchRegistry,
    broadcaster: UpdateBroadcaster,
    search_type: SearchType,
    params: dict[str, Any],
) -> tuple[str, list[dict[str, Any]], CacheStatus]:
    results, cache_status = await service.search(search_type, params)
    search_id = str(uuid.uuid4())
    registry.register(search_id, search_type, params)
    if cache_status is CacheStatus.MISS:
        update = PriceUpdate(
            search_id=search_id,
            type=search_type,
            params=params,
            results=results,
            timestamp=datetime.now(UTC),
        )
        await broadcaster.publish(search_id, update.model_dump(mode="json"))
    return search_id, results, cache_status


@router.get("/search", response_model=TrackedSearchResponse)
async def search_with_tracking(
    service: SearchDep,
    registry: RegistryDep,
    broadcaster: BroadcasterDep,
    type_: Annotated[str | None, Query(alias="type")] = None,
    from_: Annotated[str | None, Query(alias="from")] = None,
    to: str | None = None,
    city: str | None = None,
    date: str | None = None,
    check_in_date: Annotated[str | None, Query(alias="checkInDate")] = None,
    check_out_date: Annotated[str | None, Query(alias="checkOutDate")] = None,
    return_date: Annotated[str | None, Query(alias="returnDate")] = None,
    adults: AdultsQuery = 1,
) -> TrackedSearchResponse:
    """Search one type and register it for periodic price refresh."""
    params = _compact(
        **{
            "from": from_,
            "to": to,
            "city": city,
            "date": date,
            "checkInDate": check_in_date,
            "checkOutDate": check_out_date,
            "returnDate": return_date,
            "adults": adults,
        }
    )
    try:
        search_type = parse_search_type(type_ or "")
        search_id, results, cache_status = await _search_and_track(
            service, registry, broadcaster, search_type, params
        )
    except InvalidSearchError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    cached = cache_status is CacheStatus.HIT
    return TrackedSearchResponse(
        message="Search completed (cached)" if cached else "Search completed",
        search_id=search_id,
        type=search_type,
        params=params,
        data=results,
        cached=cached,
        timestamp=datetime.now(UTC),
    )


@router.get("/search-all", response_model=TrackedSearchAllResponse)
async def search_all_tracked(
    service: SearchDep,
    registry: RegistryDep,
    broadcaster: BroadcasterDep,
    from_: Annotated[str | None, Query(alias="from")] = None,
    to: str | None = None,
    city: str | None = None,
    date: str | None = None,
    check_in_date: Annotated[str | None, Query(alias="checkInDate")] = None,
    check_out_date: Annotated[str | None, Query(alias="checkOutDate")] = None,
    return_date: Annotated[str | None, Query(alias="returnDate")] = None,
    adults: AdultsQuery = 1,
) -> TrackedSearchAllResponse:
    """Search every type the parameters allow, tracking each one separately."""
    plans: dict[SearchType, dict[str, Any]] = {}
    if from_ and to and date:
        route = {"from": from_, "to": to, "date": date, "adults": adults}
        plans[SearchType.FLIGHTS] = _compact(**route, returnDate=return_date)
        plans[SearchType.BUSES] = _compact(**route)
    if city and (date or check_in_date):
        plans[SearchType.HOTELS] = _compact(
            city=city,
            date=date or check_in_date,
            checkInDate=check_in_date or date,
            checkOutDate=check_out_date or return_date,
            adults=adults,
        )
    if not plans:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid search parameters"
        )
    try:
        for kind, params in plans.items():
            service.validate(kind, params)
    except InvalidSearchError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    outcomes = await asyncio.gather(
        *(
            _search_and_track(service, registry, broadcaster, kind, params)
            for kind, params in plans.items()
        ),
        return_exceptions=True,
    )
    search_ids: dict[SearchType, str] = {}
    data: dict[str, list[dict[str, Any]]] = {}
    for kind, outcome in zip(plans, outcomes, strict=True):
        if isinstance(outcome, Exception):
            logger.error("Tracked %s search failed: %s", kind, outcome)
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        search_ids[kind], data[kind.value], _ = outcome

    return TrackedSearchAllResponse(
        search_ids=search_ids,
        data=SearchData(**data),
        timestamp=datetime.now(UTC),
    )


@router.get("/status/{search_id}", response_model=SearchStatusResponse)
async def get_search_status(
    registry: RegistryDep, search_id: str
) -> SearchStatusResponse:
    registry.touch(search_id)
    search = registry.get(search_id)
    if search is None:
        raise _search_not_found()
    return SearchStatusResponse(search=search)


@router.delete("/track/{search_id}", response_model=StopTrackingResponse)
async def stop_tracking(registry: RegistryDep, search_id: str) -> StopTrackingResponse:
    if not registry.unregister(search_id):
        raise _search_not_found()
    return StopTrackingResponse(search_id=search_id)


@router.get("/scheduler", response_model=SchedulerStatus)
async def scheduler_status(scheduler: SchedulerDep) -> SchedulerStatus:
    return scheduler.status()
