"""WebSocket channel for live price updates.

Clients send ``{"event": "subscribe_search", "search_id": ...}`` or
``{"event": "unsubscribe_search", "search_id": ...}`` and receive
``subscribed``, ``unsubscribed``, ``error`` and ``price_update`` events.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from wayfare_api.dependencies import get_broadcaster, get_registry
from wayfare_api.realtime.broadcaster import UpdateBroadcaster
from wayfare_api.realtime.registry import ActiveSearchRegistry

logger = logging.getLogger(__name__)

router = APIRouter()

_EVENTS = ("subscribe_search", "unsubscribe_search")
_BAD_MESSAGE = "Expected subscribe_search or unsubscribe_search with a search_id"


class WebSocketSubscriber:
    """Broadcaster handle for one WebSocket connection."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, payload: dict[str, Any]) -> None:
        await self._websocket.send_json({"event": "price_update", **payload})


@router.websocket("/ws")
async def price_updates(
    websocket: WebSocket,
    broadcaster: UpdateBroadcaster = Depends(get_broadcaster),
    registry: ActiveSearchRegistry = Depends(get_registry),
) -> None:
    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    logger.info("Client connected: %s", websocket.client)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"event": "error", "message": _BAD_MESSAGE})
                continue
            if not isinstance(message, dict):
                message = {}
            event = message.get("event")
            search_id = message.get("search_id")
            if event not in _EVENTS or not isinstance(search_id, str) or not search_id:
                await websocket.send_json({"event": "error", "message": _BAD_MESSAGE})
                continue

            if event == "subscribe_search":
                broadcaster.subscribe(search_id, subscriber)
                registry.touch(search_id)
                await websocket.send_json(
                    {
                        "event": "subscribed",
                        "search_id": search_id,
                        "message": f"Subscribed to search {search_id}",
                    }
                )
            elif broadcaster.unsubscribe(search_id, subscriber):
                await websocket.send_json(
                    {
                        "event": "unsubscribed",
                        "search_id": search_id,
                        "message": f"Unsubscribed from search {search_id}",
                    }
                )
            else:
                await websocket.send_json(
                    {
                        "event": "error",
                        "search_id": search_id,
                        "message": f"Search {search_id} not found",
                    }
                )
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", websocket.client)
    finally:
        broadcaster.unsubscribe_all(subscriber)
