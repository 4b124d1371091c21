"""Reference-counted channel subscriptions shared by all connections.

One upstream bus subscription per channel, however many sockets want it:
the first increment subscribes, the last decrement unsubscribes.
"""

from __future__ import annotations

import logging

from Market_Edge.streaming.bus import PubSubBus

logger = logging.getLogger(__name__)


class ChannelRegistry:
    """Per-channel listener counts for one gateway instance.

    Counts never go negative and a channel whose count reaches zero is
    removed, so a later subscribe starts from scratch and re-subscribes
    upstream.
    """

    def __init__(self, bus: PubSubBus) -> None:
        self._bus = bus
        self._counts: dict[str, int] = {}

    def count(self, channel: str) -> int:
        """Current listener count for *channel* (0 if untracked)."""
        return self._counts.get(channel, 0)

    def channels(self) -> list[str]:
        """Channels with at least one listener."""
        return list(self._counts)

    async def increment(self, channel: str) -> int:
        count = self._counts.get(channel, 0)
        self._counts[channel] = count + 1
        if count == 0:
            logger.info("First listener on %s, subscribing upstream", channel)
            await self._bus.subscribe(channel)
        return count + 1

    async def decrement(self, channel: str) -> int:
        count = self._counts.get(channel, 0)
        if count == 0:
            logger.debug("Decrement on untracked channel %s ignored", channel)
            return 0
        if count == 1:
            del self._counts[channel]
            logger.info("Last listener left %s, unsubscribing upstream", channel)
            await self._bus.unsubscribe(channel)
            return 0
        self._counts[channel] = count - 1
        return count - 1
