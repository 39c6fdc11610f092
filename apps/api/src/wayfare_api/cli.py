"""CLI for inspecting and clearing the search cache."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import click

from wayfare_api.cache.cache_keys import SEARCH_PATTERN, legacy_search_key
from wayfare_api.cache.redis_client import CacheStore
from wayfare_api.config import settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

_NEAR_EXPIRY_SECONDS = 300


async def _open_store(redis_url: str) -> CacheStore:
    return await CacheStore.from_url(redis_url)


def _run(redis_url: str, action: Callable[[CacheStore], Awaitable[Any]]) -> Any:
    async def _main() -> Any:
        store = await _open_store(redis_url)
        try:
            return await action(store)
        finally:
            await store.close()

    return asyncio.run(_main())


def _result_counts(payload: Any) -> str:
    """Summarize a cached search payload of either key scheme."""
    if isinstance(payload, list):
        return f"Results={len(payload)}"
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        data = payload["data"]
        return ", ".join(
            f"{name.capitalize()}={len(data.get(name) or [])}"
            for name in ("hotels", "flights", "buses")
        )
    return "Results=?"


@click.group()
@click.option(
    "--redis-url", default=None, help="Redis URL (defaults to WAYFARE_REDIS_URL)"
)
@click.option("-v", "--verbose", is_flag=True, help="Log cache operations")
@click.pass_context
def cli(ctx: click.Context, redis_url: str | None, verbose: bool) -> None:
    """Wayfare search cache tools."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    ctx.obj = redis_url or settings.redis_url


@cli.command("list")
@click.pass_obj
def list_searches(redis_url: str) -> None:
    """Show every cached search with its TTL and result counts."""

    async def _action(store: CacheStore) -> int:
        keys = await store.keys(SEARCH_PATTERN)
        for key in keys:
            ttl = await store.ttl(key)
            payload = await store.get(key)
            shown_ttl = ttl if ttl is not None else "-"
            click.echo(f"{key}  TTL={shown_ttl}s  {_result_counts(payload)}")
        return len(keys)

    total = _run(redis_url, _action)
    click.echo(f"Total cached searches: {total}")


@cli.command("clear")
@click.pass_obj
def clear_searches(redis_url: str) -> None:
    """Delete every cached search result."""
    if _run(redis_url, lambda store: store.delete_pattern(SEARCH_PATTERN)):
        click.echo("All search cache cleared")
    else:
        raise click.ClickException("Could not clear the search cache")


@cli.command("info")
@click.argument("search_type")
@click.option("--from", "from_", default=None, help="Origin")
@click.option("--to", default=None, help="Destination")
@click.option("--city", default=None, help="Hotel city")
@click.option("--date", default=None, help="Travel date (YYYY-MM-DD)")
@click.option("--json-output", is_flag=True, help="Print the cached payload as JSON")
@click.pass_obj
def cache_info(
    redis_url: str,
    search_type: str,
    from_: str | None,
    to: str | None,
    city: str | None,
    date: str | None,
    json_output: bool,
) -> None:
    """Look up one combined search in the cache."""
    key = legacy_search_key(search_type, from_, to, city, date)
    payload = _run(redis_url, lambda store: store.get(key))
    if payload is None:
        click.echo(f"CACHE MISS: {key}")
        return
    click.echo(f"CACHE HIT: {key}")
    click.echo(_result_counts(payload))
    click.echo(f"Data size: {len(json.dumps(payload))} bytes")
    if json_output:
        click.echo(json.dumps(payload, indent=2))


@cli.command("stats")
@click.pass_obj
def cache_stats(redis_url: str) -> None:
    """Summarize the cached searches."""

    async def _action(store: CacheStore) -> tuple[int, int, int]:
        keys = await store.keys(SEARCH_PATTERN)
        total_size = 0
        near_expiry = 0
        for key in keys:
            total_size += len(json.dumps(await store.get(key)))
            ttl = await store.ttl(key)
            if ttl is not None and ttl < _NEAR_EXPIRY_SECONDS:
                near_expiry += 1
        return len(keys), total_size, near_expiry

    count, size, near_expiry = _run(redis_url, _action)
    click.echo(f"Total cached items: {count}")
    click.echo(f"Total cache size: {size / 1024:.2f} KB")
    click.echo(f"Items expiring soon (< 5 min): {near_expiry}")


@cli.command("flush")
@click.confirmation_option(prompt="Remove every key from the cache?")
@click.pass_obj
def flush(redis_url: str) -> None:
    """Remove every key, not only search results."""
    if _run(redis_url, lambda store: store.flush_all()):
        click.echo("Cache flushed")
    else:
        raise click.ClickException("Could not flush the cache")


if __name__ == "__main__":
    cli()
