"""Per-connection subscription state for the market WebSocket.

A ``ConnectionSession`` owns the channels one socket is listening to and the
bus handler registered for each. Everything it registers it also releases:
on unsubscribe per channel, on close for whatever is left.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Final

from pydantic import ValidationError

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.streaming import ClientMessage, QuoteMessage
from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.streaming.bus import MessageHandler, PubSubBus
from Market_Edge.streaming.registry import ChannelRegistry

logger = logging.getLogger(__name__)

SendText = Callable[[str], Awaitable[None]]

CHANNEL_PREFIX: Final[str] = "market"
ACTION_SUBSCRIBE: Final[str] = "subscribe"
ACTION_UNSUBSCRIBE: Final[str] = "unsubscribe"


def channel_for(symbol: str) -> str:
    """Bus channel carrying updates for *symbol*."""
    return f"{CHANNEL_PREFIX}:{symbol}"


class ConnectionSession:
    """Subscriptions held by a single client connection.

    Args:
        send: Coroutine function writing one text frame to the client.
        aggregator: Source of the initial quote pushed on subscribe.
        bus: Shared pub/sub bus the handlers are registered on.
        registry: Shared channel reference counts.
    """

    def __init__(
        self,
        send: SendText,
        aggregator: MarketDataAggregator,
        bus: PubSubBus,
        registry: ChannelRegistry,
    ) -> None:
        self._send = send
        self._aggregator = aggregator
        self._bus = bus
        self._registry = registry
        self._subscriptions: dict[str, MessageHandler] = {}
        self._closed = False

    @property
    def channels(self) -> list[str]:
        """Channels this connection is currently subscribed to."""
        return list(self._subscriptions)

    @property
    def closed(self) -> bool:
        return self._closed

    async def handle_text(self, raw: str) -> None:
        """Apply one inbound client frame.

        Malformed JSON, a missing ``action``, and subscribe/unsubscribe
        without a ``symbol`` are logged and dropped; unknown actions are
        ignored. Nothing here raises.
        """
        try:
            message = ClientMessage.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Ignoring malformed client message: %s", exc.errors(include_input=False)
            )
            return

        if message.action in (ACTION_SUBSCRIBE, ACTION_UNSUBSCRIBE) and not message.symbol:
            logger.warning("Ignoring %s without a symbol", message.action)
            return

        if message.action == ACTION_SUBSCRIBE:
            await self.subscribe(message.symbol, message.asset_class)
        elif message.action == ACTION_UNSUBSCRIBE:
            await self.unsubscribe(message.symbol)
        else:
            logger.debug("Ignoring unknown action %r", message.action)

    async def subscribe(self, symbol: str, asset_class: AssetClass = AssetClass.STOCK) -> None:
        """Push an initial quote, then forward bus updates for *symbol*.

        A second subscribe to a channel this connection already holds is a
        no-op.
        """
        channel = channel_for(symbol)
        if self._closed or channel in self._subscriptions:
            return

        quote = await self._aggregator.get_quote(symbol, asset_class)
        if self._closed:
            return
        await self._push(quote.model_dump(mode="json", by_alias=True))

        async def forward(update_channel: str, payload: str) -> None:
            if update_channel != channel:
                return
            try:
                data = json.loads(payload)
            except ValueError:
                logger.warning("Dropping non-JSON update on %s", channel)
                return
            await self._push(data)

        self._subscriptions[channel] = forward
        self._bus.add_handler(forward)
        await self._registry.increment(channel)
        logger.debug("Subscribed to %s", channel)

    async def unsubscribe(self, symbol: str) -> None:
        """Stop forwarding *symbol*; a no-op if it was never subscribed."""
        channel = channel_for(symbol)
        handler = self._subscriptions.pop(channel, None)
        if handler is None:
            return
        await self._release(channel, handler)
        logger.debug("Unsubscribed from %s", channel)

    async def close(self) -> None:
        """Release every channel still held. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        held = list(self._subscriptions.items())
        self._subscriptions.clear()
        for channel, handler in held:
            await self._release(channel, handler)

        if held:
            logger.debug("Session closed, released %d channel(s)", len(held))

    async def _release(self, channel: str, handler: MessageHandler) -> None:
        self._bus.remove_handler(handler)
        await self._registry.decrement(channel)

    async def _push(self, data: dict[str, Any]) -> None:
        # The socket can close between a bus message and this send
        try:
            await self._send(QuoteMessage(data=data).model_dump_json())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Send to client failed: %s", exc)
