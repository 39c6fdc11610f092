"""HTTP and WebSocket surface, with Redis and providers replaced by fakes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from wayfare_api.config import ApiSettings
from wayfare_api.main import create_app
from wayfare_api.services.catalog_service import InMemoryCatalogRepository
from wayfare_core.schemas import SearchType

ROUTE = {"from": "delhi", "to": "mumbai", "date": "2025-12-01"}


@pytest.fixture
def repo() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def client(fake_redis, providers, repo):
    app = create_app(
        ApiSettings(scheduler_autostart=False),
        redis_client=fake_redis,
        providers=providers,
        catalog_repository=repo,
    )
    with TestClient(app) as test_client:
        yield test_client


def test_search_miss_then_hit(client, fake_redis, providers):
    first = client.get("/api/search", params={"type": "flights", **ROUTE})
    second = client.get("/api/search", params={"type": "flights", **ROUTE})

    assert first.status_code == second.status_code == 200
    body = first.json()
    assert body["_cacheStatus"] == "MISS"
    assert body["success"] is True
    assert body["filters"]["from"] == "delhi"
    assert body["count"] == {"total": 10, "hotels": 0, "flights": 10, "buses": 0}
    assert second.json()["_cacheStatus"] == "HIT"
    assert second.json()["data"] == body["data"]
    assert providers[SearchType.FLIGHTS].calls == 1
    assert "search:flights:delhi:mumbai::2025-12-01" in fake_redis._data
    assert len(client.app.state.registry) == 0


def test_search_defaults_to_all_types(client):
    response = client.get("/api/search", params={**ROUTE, "city": "mumbai"})

    assert response.status_code == 200
    count = response.json()["count"]
    assert (count["hotels"], count["flights"], count["buses"]) == (10, 10, 12)


@pytest.mark.parametrize(
    "params",
    [
        {"type": "trains"},
        {"type": "flights", "from": "a", "to": "b", "date": "tomorrow"},
    ],
)
def test_search_rejects_bad_input(client, fake_redis, params):
    response = client.get("/api/search", params=params)
    assert response.status_code == 400
    assert fake_redis._data == {}


def test_search_item_by_id(client, repo):
    client.post("/api/admin/hotels", json={"id": "H1", "name": "Sea Breeze"})

    response = client.get("/api/search/hotel/H1")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "type": "hotels",
        "hotel": {"id": "H1", "name": "Sea Breeze"},
    }
    assert client.get("/api/search/hotels/nope").status_code == 404
    assert client.get("/api/search/trains/H1").status_code == 400


def test_admin_update_invalidates_catalog_cache(client, fake_redis):
    created = client.post("/api/admin/hotels", json={"id": "H1", "name": "Old Name"})
    assert created.status_code == 201
    assert created.json()["data"]["hotel"]["name"] == "Old Name"

    assert client.get("/api/hotels/H1").json()["data"]["hotel"]["name"] == "Old Name"
    assert client.get("/api/hotels").json()["count"] == 1
    assert "hotels:H1" in fake_redis._data

    updated = client.put("/api/admin/hotels/H1", json={"name": "New Name"})
    assert updated.status_code == 200
    assert "hotels:H1" not in fake_redis._data
    assert "hotels:all" not in fake_redis._data

    assert client.get("/api/hotels/H1").json()["data"]["hotel"]["name"] == "New Name"


def test_admin_missing_items(client):
    assert client.put("/api/admin/buses/nope", json={"x": 1}).status_code == 404
    assert client.delete("/api/admin/buses/nope").status_code == 404
    response = client.get("/api/buses/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Bus not found"


def test_admin_delete(client):
    client.post("/api/admin/flights", json={"id": "F1"})
    client.get("/api/flights/F1")

    assert client.delete("/api/admin/flights/F1").status_code == 200
    assert client.get("/api/flights/F1").status_code == 404


def test_realtime_search_registers_and_reports_cache(client):
    params = {"type": "flights", **ROUTE}
    first = client.get("/api/realtime/search", params=params).json()
    second = client.get("/api/realtime/search", params=params).json()

    assert first["cached"] is False
    assert first["message"] == "Search completed"
    assert second["cached"] is True
    assert second["message"] == "Search completed (cached)"
    assert second["data"] == first["data"]
    assert first["search_id"] != second["search_id"]

    registry = client.app.state.registry
    assert first["search_id"] in registry and second["search_id"] in registry


def test_realtime_status_and_stop_tracking(client):
    search_id = client.get(
        "/api/realtime/search", params={"type": "buses", **ROUTE}
    ).json()["search_id"]

    status = client.get(f"/api/realtime/status/{search_id}")
    assert status.status_code == 200
    assert status.json()["search"]["id"] == search_id
    assert status.json()["search"]["type"] == "buses"

    assert client.delete(f"/api/realtime/track/{search_id}").status_code == 200
    assert client.delete(f"/api/realtime/track/{search_id}").status_code == 404
    assert client.get(f"/api/realtime/status/{search_id}").status_code == 404


@pytest.mark.parametrize(
    "params", [{}, {"type": "trains"}, {"type": "hotels", "adults": 0}]
)
def test_realtime_search_rejects_bad_input(client, params):
    response = client.get("/api/realtime/search", params=params)
    assert response.status_code in (400, 422)
    assert len(client.app.state.registry) == 0


def test_realtime_search_all(client):
    response = client.get(
        "/api/realtime/search-all", params={**ROUTE, "city": "mumbai"}
    )

    assert response.status_code == 200
    body = response.json()
    assert set(body["search_ids"]) == {"flights", "buses", "hotels"}
    assert len(body["data"]["flights"]) == 10
    assert len(body["data"]["hotels"]) == 10
    assert len(client.app.state.registry) == 3


def test_realtime_search_all_rejects_before_tracking_anything(client, providers):
    response = client.get(
        "/api/realtime/search-all",
        params={
            "from": "DEL",
            "to": "BOM",
            "date": "2025-12-01",
            "returnDate": "2025-11-01",
        },
    )

    assert response.status_code == 400
    assert "return_date" in response.json()["detail"]
    assert len(client.app.state.registry) == 0
    assert all(p.calls == 0 for p in providers.values())


def test_realtime_search_all_needs_a_route_or_city(client):
    response = client.get("/api/realtime/search-all", params={"from": "delhi"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid search parameters"


def test_scheduler_status(client):
    client.get("/api/realtime/search", params={"type": "flights", **ROUTE})

    body = client.get("/api/realtime/scheduler").json()

    assert body == {
        "state": "STOPPED",
        "running": False,
        "interval_ms": 30_000,
        "active_searches": 1,
    }


def test_websocket_subscription_lifecycle(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "subscribe_search", "search_id": "S"})
        assert ws.receive_json()["event"] == "subscribed"

        ws.send_json({"event": "unsubscribe_search", "search_id": "S"})
        assert ws.receive_json()["event"] == "unsubscribed"

        ws.send_json({"event": "unsubscribe_search", "search_id": "S"})
        reply = ws.receive_json()
        assert reply == {
            "event": "error",
            "search_id": "S",
            "message": "Search S not found",
        }

        ws.send_json({"event": "dance"})
        assert ws.receive_json()["event"] == "error"


def test_websocket_receives_price_updates(client, providers):
    search_id = client.get(
        "/api/realtime/search", params={"type": "flights", **ROUTE}
    ).json()["search_id"]

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "subscribe_search", "search_id": search_id})
        assert ws.receive_json()["event"] == "subscribed"

        refreshed = client.portal.call(client.app.state.scheduler.tick)
        update = ws.receive_json()

    assert refreshed == 1
    assert update["event"] == "price_update"
    assert update["search_id"] == search_id
    assert len(update["results"]) == 10
    assert providers[SearchType.FLIGHTS].calls == 2


def test_websocket_rejects_non_string_search_id(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "subscribe_search", "search_id": ["x"]})
        assert ws.receive_json()["event"] == "error"

        ws.send_json({"event": "subscribe_search", "search_id": "S"})
        assert ws.receive_json()["event"] == "subscribed"
