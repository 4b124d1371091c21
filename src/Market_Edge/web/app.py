"""FastAPI app factory and application lifespan."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from Market_Edge.config import Settings, get_settings
from Market_Edge.logging_config import configure_logging
from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.services.cache import ServiceCache
from Market_Edge.streaming.bus import InMemoryBus, PubSubBus, RedisPubSubBus
from Market_Edge.streaming.gateway import StreamingGateway
from Market_Edge.web.middleware import RequestLoggingMiddleware, register_exception_handlers

logger = logging.getLogger(__name__)


def _build_bus(settings: Settings) -> PubSubBus:
    if settings.redis_url:
        return RedisPubSubBus.from_url(settings.redis_url)
    return InMemoryBus()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Shared resources (cache, aggregator, bus, gateway) are built on startup,
    stored on ``app.state``, and closed on shutdown in reverse order.
    """
    configure_logging()
    resolved = settings if settings is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cache = ServiceCache.from_url(resolved.redis_url)
        aggregator = MarketDataAggregator.from_settings(resolved, cache)
        bus = _build_bus(resolved)
        gateway = StreamingGateway(aggregator, bus)

        app.state.settings = resolved
        app.state.cache = cache
        app.state.aggregator = aggregator
        app.state.bus = bus
        app.state.gateway = gateway
        logger.info(
            "Market Edge started: cache=%s, providers=%d",
            cache.backend,
            len(aggregator.provider_names),
        )
        try:
            yield
        finally:
            await gateway.aclose()
            await bus.close()
            await aggregator.aclose()
            await cache.aclose()
            logger.info("Market Edge stopped")

    app = FastAPI(title="Market Edge", docs_url=None, redoc_url=None, lifespan=lifespan)

    from Market_Edge.web.routes import health_router, market_data_router, stream_router

    app.include_router(market_data_router)
    app.include_router(health_router)
    app.include_router(stream_router)

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    logger.info("Market Edge web app created")
    return app
