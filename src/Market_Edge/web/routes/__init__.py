"""FastAPI route modules for Market Edge.

Re-exports all routers so the application factory can import them:
    from Market_Edge.web.routes import health_router, market_data_router
"""

from Market_Edge.web.routes.health import router as health_router
from Market_Edge.web.routes.market_data import router as market_data_router
from Market_Edge.web.routes.stream import router as stream_router

__all__ = [
    "health_router",
    "market_data_router",
    "stream_router",
]
