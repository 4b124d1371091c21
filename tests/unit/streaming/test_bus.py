"""Tests for the pub/sub bus implementations.

Covers:
- InMemoryBus delivers to every handler, only on subscribed channels
- Handler removal, including removing an unknown handler
- A failing handler does not stop delivery to the others
- RedisPubSubBus delegates to redis and swallows Redis errors
- RedisPubSubBus listener dispatches published messages to handlers
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis.asyncio as redis

from Market_Edge.streaming.bus import InMemoryBus, PubSubBus, RedisPubSubBus


class Collector:
    def __init__(self) -> None:
        self.received: list[tuple[str, str]] = []

    async def __call__(self, channel: str, payload: str) -> None:
        self.received.append((channel, payload))


class TestInMemoryBus:
    """Tests for InMemoryBus."""

    @pytest.mark.asyncio()
    async def test_publish_reaches_all_handlers(self) -> None:
        bus = InMemoryBus()
        first, second = Collector(), Collector()
        bus.add_handler(first)
        bus.add_handler(second)
        await bus.subscribe("market:AAPL")

        await bus.publish("market:AAPL", '{"price": 1}')

        assert first.received == [("market:AAPL", '{"price": 1}')]
        assert second.received == [("market:AAPL", '{"price": 1}')]

    @pytest.mark.asyncio()
    async def test_unsubscribed_channel_dropped(self) -> None:
        bus = InMemoryBus()
        collector = Collector()
        bus.add_handler(collector)

        await bus.publish("market:AAPL", "{}")
        await bus.subscribe("market:AAPL")
        await bus.unsubscribe("market:AAPL")
        await bus.publish("market:AAPL", "{}")

        assert collector.received == []

    @pytest.mark.asyncio()
    async def test_removed_handler_not_called(self) -> None:
        bus = InMemoryBus()
        collector = Collector()
        bus.add_handler(collector)
        bus.remove_handler(collector)
        await bus.subscribe("market:AAPL")

        await bus.publish("market:AAPL", "{}")

        assert collector.received == []
        assert bus.handler_count == 0

    def test_remove_unknown_handler_is_safe(self) -> None:
        InMemoryBus().remove_handler(Collector())

    @pytest.mark.asyncio()
    async def test_failing_handler_isolated(self) -> None:
        bus = InMemoryBus()

        async def broken(channel: str, payload: str) -> None:
            raise RuntimeError("boom")

        collector = Collector()
        bus.add_handler(broken)
        bus.add_handler(collector)
        await bus.subscribe("market:AAPL")

        await bus.publish("market:AAPL", "{}")

        assert collector.received == [("market:AAPL", "{}")]

    @pytest.mark.asyncio()
    async def test_close_clears_state(self) -> None:
        bus = InMemoryBus()
        bus.add_handler(Collector())
        await bus.subscribe("market:AAPL")
        await bus.close()
        assert bus.handler_count == 0
        assert bus.subscribed_channels == frozenset()

    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryBus(), PubSubBus)


@pytest.fixture()
def redis_parts() -> tuple[MagicMock, AsyncMock]:
    """Mock Redis client and the pubsub object it hands out."""
    async def idle(**_: object) -> None:
        # Real get_message blocks for its timeout; an instant None would spin
        await asyncio.sleep(0.01)

    pubsub = AsyncMock()
    pubsub.get_message = AsyncMock(side_effect=idle)
    client = MagicMock(spec=redis.Redis)
    client.pubsub.return_value = pubsub
    client.publish = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client, pubsub


class TestRedisPubSubBus:
    """Tests for RedisPubSubBus against a mocked client."""

    @pytest.mark.asyncio()
    async def test_subscribe_and_unsubscribe_delegate(
        self, redis_parts: tuple[MagicMock, AsyncMock]
    ) -> None:
        client, pubsub = redis_parts
        bus = RedisPubSubBus(client)

        await bus.subscribe("market:AAPL")
        await bus.unsubscribe("market:AAPL")
        await bus.close()

        pubsub.subscribe.assert_awaited_once_with("market:AAPL")
        pubsub.unsubscribe.assert_awaited_once_with("market:AAPL")

    @pytest.mark.asyncio()
    async def test_publish_delegates(self, redis_parts: tuple[MagicMock, AsyncMock]) -> None:
        client, _ = redis_parts
        bus = RedisPubSubBus(client)
        await bus.publish("market:AAPL", "{}")
        client.publish.assert_awaited_once_with("market:AAPL", "{}")

    @pytest.mark.asyncio()
    async def test_redis_errors_swallowed(
        self, redis_parts: tuple[MagicMock, AsyncMock]
    ) -> None:
        client, pubsub = redis_parts
        pubsub.subscribe.side_effect = redis.ConnectionError("refused")
        pubsub.unsubscribe.side_effect = redis.ConnectionError("refused")
        client.publish.side_effect = redis.ConnectionError("refused")
        bus = RedisPubSubBus(client)

        await bus.subscribe("market:AAPL")
        await bus.unsubscribe("market:AAPL")
        await bus.publish("market:AAPL", "{}")
        await bus.close()

    @pytest.mark.asyncio()
    async def test_listener_dispatches_messages(
        self, redis_parts: tuple[MagicMock, AsyncMock]
    ) -> None:
        client, pubsub = redis_parts
        delivered = asyncio.Event()
        collector = Collector()

        async def handler(channel: str, payload: str) -> None:
            await collector(channel, payload)
            delivered.set()

        messages = [
            {"type": "message", "channel": b"market:AAPL", "data": b'{"price": 1}'},
        ]

        async def next_message(**_: object) -> dict[str, object] | None:
            if messages:
                return messages.pop(0)
            await asyncio.sleep(0.01)
            return None

        pubsub.get_message.side_effect = next_message
        bus = RedisPubSubBus(client)
        bus.add_handler(handler)

        await bus.subscribe("market:AAPL")
        await asyncio.wait_for(delivered.wait(), timeout=1.0)
        await bus.close()

        assert collector.received == [("market:AAPL", '{"price": 1}')]
        pubsub.aclose.assert_awaited_once()
        client.aclose.assert_awaited_once()
