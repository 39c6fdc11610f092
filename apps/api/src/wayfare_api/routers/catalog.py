"""Catalog reads (long-lived cache) and admin writes that invalidate it."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from wayfare_api.dependencies import get_catalog_service
from wayfare_api.services.catalog_service import CatalogService, singular
from wayfare_core.schemas import SearchType

router = APIRouter(tags=["catalog"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])

CatalogDep = Annotated[CatalogService, Depends(get_catalog_service)]
ItemBody = Annotated[dict[str, Any], Body()]


def _not_found(item_type: SearchType) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{singular(item_type).capitalize()} not found",
    )


@router.get("/{item_type}")
async def list_items(catalog: CatalogDep, item_type: SearchType) -> dict[str, Any]:
    return await catalog.list_items(item_type)


@router.get("/{item_type}/{item_id}")
async def get_item(
    catalog: CatalogDep, item_type: SearchType, item_id: str
) -> dict[str, Any]:
    response = await catalog.get_item(item_type, item_id)
    if response is None:
        raise _not_found(item_type)
    return response


@admin_router.post("/{item_type}", status_code=status.HTTP_201_CREATED)
async def create_item(
    catalog: CatalogDep, item_type: SearchType, item: ItemBody
) -> dict[str, Any]:
    saved = await catalog.create_item(item_type, item)
    return {"success": True, "data": {singular(item_type): saved}}


@admin_router.put("/{item_type}/{item_id}")
async def update_item(
    catalog: CatalogDep, item_type: SearchType, item_id: str, changes: ItemBody
) -> dict[str, Any]:
    saved = await catalog.update_item(item_type, item_id, changes)
    if saved is None:
        raise _not_found(item_type)
    return {"success": True, "data": {singular(item_type): saved}}


@admin_router.delete("/{item_type}/{item_id}")
async def delete_item(
    catalog: CatalogDep, item_type: SearchType, item_id: str
) -> dict[str, Any]:
    if not await catalog.delete_item(item_type, item_id):
        raise _not_found(item_type)
    return {"success": True, "message": f"{singular(item_type).capitalize()} deleted"}
