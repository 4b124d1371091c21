"""Publish/subscribe bus carrying live quote updates to the gateway.

Two implementations share one contract: ``RedisPubSubBus`` for deployments
with a shared Redis, ``InMemoryBus`` for single-process runs and tests.
Handlers are registered bus-wide and receive every inbound message as
``(channel, payload)``; filtering by channel is the handler's job.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Final, Protocol, runtime_checkable

import redis.asyncio as redis

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, str], Awaitable[None]]

# Poll interval for the Redis listener loop (seconds)
LISTENER_POLL_TIMEOUT: Final[float] = 1.0
# Back-off after a Redis error in the listener loop (seconds)
LISTENER_ERROR_BACKOFF: Final[float] = 1.0


@runtime_checkable
class PubSubBus(Protocol):
    """What the gateway needs from a pub/sub transport."""

    async def subscribe(self, channel: str) -> None: ...

    async def unsubscribe(self, channel: str) -> None: ...

    def add_handler(self, handler: MessageHandler) -> None: ...

    def remove_handler(self, handler: MessageHandler) -> None: ...

    async def publish(self, channel: str, payload: str) -> None: ...

    async def close(self) -> None: ...


class _HandlerSet:
    """Ordered handler list shared by both bus implementations."""

    def __init__(self) -> None:
        self._handlers: list[MessageHandler] = []

    @property
    def handler_count(self) -> int:
        """Number of handlers currently registered."""
        return len(self._handlers)

    def add_handler(self, handler: MessageHandler) -> None:
        self._handlers.append(handler)

    def remove_handler(self, handler: MessageHandler) -> None:
        with contextlib.suppress(ValueError):
            self._handlers.remove(handler)

    async def _dispatch(self, channel: str, payload: str) -> None:
        # Snapshot: handlers may deregister while a message is in flight
        for handler in list(self._handlers):
            try:
                await handler(channel, payload)
            except Exception:
                logger.exception("Bus handler failed for channel %s", channel)


class InMemoryBus(_HandlerSet):
    """In-process bus: ``publish`` delivers only to subscribed channels."""

    def __init__(self) -> None:
        super().__init__()
        self._subscribed: set[str] = set()

        logger.info("InMemoryBus initialized")

    @property
    def subscribed_channels(self) -> frozenset[str]:
        return frozenset(self._subscribed)

    async def subscribe(self, channel: str) -> None:
        self._subscribed.add(channel)
        logger.debug("Bus subscribed: %s", channel)

    async def unsubscribe(self, channel: str) -> None:
        self._subscribed.discard(channel)
        logger.debug("Bus unsubscribed: %s", channel)

    async def publish(self, channel: str, payload: str) -> None:
        if channel not in self._subscribed:
            logger.debug("Dropping message for unsubscribed channel %s", channel)
            return
        await self._dispatch(channel, payload)

    async def close(self) -> None:
        self._subscribed.clear()
        self._handlers.clear()


class RedisPubSubBus(_HandlerSet):
    """Bus backed by Redis PUBLISH/SUBSCRIBE.

    A single background task reads the subscriber connection and dispatches
    each message to the registered handlers. The task starts on the first
    subscribe and runs until :meth:`close`. Redis errors are logged at
    WARNING; a failed subscribe leaves the channel silent rather than
    failing the client request.
    """

    def __init__(self, client: redis.Redis) -> None:
        super().__init__()
        self._client = client
        self._pubsub = client.pubsub(ignore_subscribe_messages=True)
        self._listener: asyncio.Task[None] | None = None

        logger.info("RedisPubSubBus initialized")

    @classmethod
    def from_url(cls, redis_url: str) -> RedisPubSubBus:
        return cls(redis.Redis.from_url(redis_url, decode_responses=True))

    async def subscribe(self, channel: str) -> None:
        try:
            await self._pubsub.subscribe(channel)
        except (redis.RedisError, OSError) as exc:
            logger.warning("Redis subscribe failed for %s: %s", channel, exc)
            return
        logger.debug("Redis subscribed: %s", channel)
        if self._listener is None or self._listener.done():
            self._listener = asyncio.create_task(self._listen(), name="redis-pubsub-listener")

    async def unsubscribe(self, channel: str) -> None:
        try:
            await self._pubsub.unsubscribe(channel)
        except (redis.RedisError, OSError) as exc:
            logger.warning("Redis unsubscribe failed for %s: %s", channel, exc)
            return
        logger.debug("Redis unsubscribed: %s", channel)

    async def publish(self, channel: str, payload: str) -> None:
        try:
            await self._client.publish(channel, payload)
        except (redis.RedisError, OSError) as exc:
            logger.warning("Redis publish failed for %s: %s", channel, exc)

    async def close(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._listener
            self._listener = None
        self._handlers.clear()
        await self._pubsub.aclose()
        await self._client.aclose()

    async def _listen(self) -> None:
        while True:
            try:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=LISTENER_POLL_TIMEOUT,
                )
            except (redis.RedisError, OSError) as exc:
                logger.warning("Redis listener error: %s", exc)
                await asyncio.sleep(LISTENER_ERROR_BACKOFF)
                continue

            if message is None or message.get("type") != "message":
                continue
            await self._dispatch(_as_text(message["channel"]), _as_text(message["data"]))


def _as_text(value: str | bytes) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value
