"""WebSocket gateway fanning bus updates out to subscribed clients.

Usage::

    bus = InMemoryBus()
    gateway = StreamingGateway(aggregator, bus)

    @app.websocket("/ws/market")
    async def market_ws(websocket: WebSocket) -> None:
        await gateway.serve(websocket)
"""

from __future__ import annotations

import logging

from fastapi import WebSocket

from Market_Edge.models.market_data import Quote
from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.streaming.bus import PubSubBus
from Market_Edge.streaming.registry import ChannelRegistry
from Market_Edge.streaming.session import ConnectionSession, SendText, channel_for

logger = logging.getLogger(__name__)


class StreamingGateway:
    """Owns the channel registry and the set of live connection sessions."""

    def __init__(
        self,
        aggregator: MarketDataAggregator,
        bus: PubSubBus,
        registry: ChannelRegistry | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._bus = bus
        self._registry = registry if registry is not None else ChannelRegistry(bus)
        self._sessions: set[ConnectionSession] = set()

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    @property
    def bus(self) -> PubSubBus:
        return self._bus

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def open_session(self, send: SendText) -> ConnectionSession:
        """Create and track a session writing frames through *send*."""
        session = ConnectionSession(send, self._aggregator, self._bus, self._registry)
        self._sessions.add(session)
        logger.info("Market WS session opened. Active sessions: %d", len(self._sessions))
        return session

    async def close_session(self, session: ConnectionSession) -> None:
        """Release everything *session* holds and stop tracking it."""
        await session.close()
        self._sessions.discard(session)
        logger.info("Market WS session closed. Active sessions: %d", len(self._sessions))

    async def publish_quote(self, quote: Quote) -> None:
        """Publish *quote* on its symbol's channel."""
        await self._bus.publish(channel_for(quote.symbol), quote.model_dump_json(by_alias=True))

    async def serve(self, websocket: WebSocket) -> None:
        """Accept *websocket* and run its receive loop until it disconnects.

        Frames are handled one at a time, in arrival order. Binary frames are
        decoded as UTF-8 text.
        """
        await websocket.accept()
        session = self.open_session(websocket.send_text)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                await session.handle_text(raw)
        finally:
            await self.close_session(session)

    async def aclose(self) -> None:
        """Close every open session (application shutdown)."""
        for session in list(self._sessions):
            await self.close_session(session)
