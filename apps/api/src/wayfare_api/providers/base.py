"""Abstract base class for all travel providers."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import BaseModel


class BaseProvider(abc.ABC):
    """Base class that every search provider must implement."""

    @abc.abstractmethod
    async def search(self, query: Any) -> list[BaseModel]:
        """Run one search and return its result items."""

    async def health_check(self) -> bool:
        """Return True if the source is reachable."""
        return True

    async def close(self) -> None:
        """Release any held resources (HTTP clients, etc.)."""
