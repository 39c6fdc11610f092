"""Publish/subscribe fan-out of price updates.

Delivery is best-effort: a payload goes to the subscribers attached at the
moment of :meth:`UpdateBroadcaster.publish` and nowhere else.  Nothing is
acknowledged, retried or kept for subscribers that join later, and a
subscriber whose send fails or takes longer than ``send_timeout`` seconds is
dropped from every channel.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    """A client connection able to receive pushed payloads."""

    async def send(self, payload: dict[str, Any]) -> None: ...


class UpdateBroadcaster:
    """Channel registry keyed by search id."""

    def __init__(self, *, send_timeout: float = 5.0) -> None:
        self._channels: dict[str, set[Subscriber]] = {}
        self._send_timeout = send_timeout

    def subscribe(self, channel: str, subscriber: Subscriber) -> None:
        self._channels.setdefault(channel, set()).add(subscriber)
        logger.info("Subscriber joined channel %s", channel)

    def unsubscribe(self, channel: str, subscriber: Subscriber) -> bool:
        """Detach *subscriber*; returns False if it was not on *channel*."""
        members = self._channels.get(channel)
        if not members or subscriber not in members:
            return False
        members.discard(subscriber)
        if not members:
            del self._channels[channel]
        logger.info("Subscriber left channel %s", channel)
        return True

    def unsubscribe_all(self, subscriber: Subscriber) -> list[str]:
        """Detach *subscriber* from every channel, e.g. on disconnect."""
        left = [ch for ch, members in self._channels.items() if subscriber in members]
        for channel in left:
            self.unsubscribe(channel, subscriber)
        return left

    def subscriber_count(self, channel: str) -> int:
        return len(self._channels.get(channel, ()))

    def channels(self) -> list[str]:
        return list(self._channels)

    async def publish(self, channel: str, payload: dict[str, Any]) -> int:
        """Send *payload* to the current subscribers of *channel*.

        Returns how many sends succeeded.
        """
        members = list(self._channels.get(channel, ()))
        if not members:
            logger.debug("No subscribers on channel %s, update dropped", channel)
            return 0

        outcomes = await asyncio.gather(
            *(
                asyncio.wait_for(member.send(payload), timeout=self._send_timeout)
                for member in members
            ),
            return_exceptions=True,
        )
        delivered = 0
        for member, outcome in zip(members, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Dropping subscriber on %s after failed send: %r", channel, outcome
                )
                self.unsubscribe_all(member)
            else:
                delivered += 1
        logger.info(
            "Broadcasted price update for search %s to %d client(s)", channel, delivered
        )
        return delivered
