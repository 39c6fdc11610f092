"""Cache inspection CLI against an in-memory Redis."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from wayfare_api import cli as cli_module
from wayfare_api.cache.redis_client import CacheStore

COMBINED_KEY = "search:all:delhi:mumbai:mumbai:2025-12-01"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def seeded(fake_redis, clock, monkeypatch):
    async def _open_store(redis_url: str) -> CacheStore:
        return CacheStore(fake_redis)

    monkeypatch.setattr(cli_module, "_open_store", _open_store)

    def put(key, value, ttl):
        fake_redis._data[key] = (json.dumps(value), clock() + ttl)

    put(
        COMBINED_KEY,
        {
            "success": True,
            "data": {"hotels": [{}] * 2, "flights": [{}] * 3, "buses": []},
        },
        60,
    )
    put("search:flights:date:2025-12-01|from:DEL|to:BOM", [{"id": "f1"}], 45)
    put("hotels:all", {"success": True, "count": 0, "data": {"hotels": []}}, 3600)
    return fake_redis


def test_list(runner, seeded):
    result = runner.invoke(cli_module.cli, ["list"])

    assert result.exit_code == 0, result.output
    assert f"{COMBINED_KEY}  TTL=60s  Hotels=2, Flights=3, Buses=0" in result.output
    assert "Results=1" in result.output
    assert "hotels:all" not in result.output
    assert "Total cached searches: 2" in result.output


def test_info_hit_and_miss(runner, seeded):
    hit = runner.invoke(
        cli_module.cli,
        ["info", "all", "--from", "delhi", "--to", "mumbai", "--city", "mumbai",
         "--date", "2025-12-01", "--json-output"],
    )
    miss = runner.invoke(cli_module.cli, ["info", "flights", "--from", "goa"])

    assert hit.exit_code == 0, hit.output
    assert f"CACHE HIT: {COMBINED_KEY}" in hit.output
    assert "Hotels=2, Flights=3, Buses=0" in hit.output
    assert '"success": true' in hit.output
    assert "CACHE MISS: search:flights:goa:::" in miss.output


def test_clear_keeps_catalog_entries(runner, seeded):
    result = runner.invoke(cli_module.cli, ["clear"])

    assert result.exit_code == 0
    assert "All search cache cleared" in result.output
    assert list(seeded._data) == ["hotels:all"]


def test_clear_reports_unreachable_redis(runner, seeded):
    seeded.down = True
    result = runner.invoke(cli_module.cli, ["clear"])
    assert result.exit_code != 0
    assert "Could not clear the search cache" in result.output


def test_stats(runner, seeded):
    result = runner.invoke(cli_module.cli, ["stats"])

    assert result.exit_code == 0, result.output
    assert "Total cached items: 2" in result.output
    assert "Items expiring soon (< 5 min): 2" in result.output
    assert "KB" in result.output


def test_flush_requires_confirmation(runner, seeded):
    aborted = runner.invoke(cli_module.cli, ["flush"], input="n\n")
    assert aborted.exit_code != 0
    assert seeded._data

    result = runner.invoke(cli_module.cli, ["flush", "--yes"])
    assert result.exit_code == 0
    assert "Cache flushed" in result.output
    assert seeded._data == {}
