"""Dependency injection providers for FastAPI route handlers.

Shared resources are created once in the application lifespan and stored on
``app.state``; these providers hand them to route handlers, and tests swap
them through ``app.dependency_overrides``.
"""

from fastapi import Request
from starlette.requests import HTTPConnection

from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.services.cache import ServiceCache
from Market_Edge.streaming.gateway import StreamingGateway


async def get_cache(request: Request) -> ServiceCache:
    """Return the app-wide ServiceCache."""
    cache: ServiceCache = request.app.state.cache
    return cache


async def get_aggregator(request: Request) -> MarketDataAggregator:
    """Return the app-wide MarketDataAggregator."""
    aggregator: MarketDataAggregator = request.app.state.aggregator
    return aggregator


async def get_gateway(connection: HTTPConnection) -> StreamingGateway:
    """Return the app-wide StreamingGateway (HTTP and WebSocket routes)."""
    gateway: StreamingGateway = connection.app.state.gateway
    return gateway
