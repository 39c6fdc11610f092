"""Cache key builders for consistent namespacing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

SEARCH_PATTERN = "search:*"


def search_key(search_type: str, params: Mapping[str, object]) -> str:
    """Build the canonical cache key for a search.

    Parameters are sorted by name, so two mappings with the same pairs
    produce the same key whatever their insertion order.
    """
    pairs = "|".join(f"{name}:{params[name]}" for name in sorted(params))
    return f"search:{search_type}:{pairs}"


def legacy_search_key(
    search_type: str,
    from_: str | None = None,
    to: str | None = None,
    city: str | None = None,
    date: str | None = None,
) -> str:
    """Build the positional key used by the combined search endpoint."""
    return f"search:{search_type}:{from_ or ''}:{to or ''}:{city or ''}:{date or ''}"


def search_item_key(search_type: str, item_id: str) -> str:
    """Build cache key for a by-id lookup through the search endpoint."""
    return f"search:{search_type}:{item_id}"


def item_key(item_type: str, item_id: str) -> str:
    """Build cache key for a single catalog item."""
    return f"{item_type}:{item_id}"


def listing_key(item_type: str) -> str:
    """Build cache key for the full catalog listing of one type."""
    return f"{item_type}:all"


def type_pattern(item_type: str) -> str:
    """Glob matching every catalog key of one type."""
    return f"{item_type}:*"
