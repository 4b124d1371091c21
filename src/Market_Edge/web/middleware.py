"""Exception handlers and request logging middleware.

Maps domain exceptions from ``Market_Edge.utils.exceptions`` to HTTP status
codes. The aggregator itself never raises; these handlers cover anything
that leaks from a route calling a vendor or the cache directly.
"""

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from Market_Edge.utils.exceptions import (
    DataFetchError,
    DataSourceUnavailableError,
    ProviderTimeoutError,
    TickerNotFoundError,
)

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("Market_Edge.web.access")

# Paths polled often enough that they are only logged at DEBUG
_QUIET_PATHS: frozenset[str] = frozenset({"/api/health"})


# ---------------------------------------------------------------------------
# Domain exception -> HTTP status handlers
# ---------------------------------------------------------------------------


async def _ticker_not_found_handler(request: Request, exc: TickerNotFoundError) -> JSONResponse:
    """Map TickerNotFoundError to HTTP 404."""
    logger.warning("Ticker not found: %s", exc)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _provider_timeout_handler(request: Request, exc: ProviderTimeoutError) -> JSONResponse:
    """Map ProviderTimeoutError to HTTP 504."""
    logger.warning("Provider timed out: %s", exc)
    return JSONResponse(status_code=504, content={"detail": str(exc)})


async def _data_source_unavailable_handler(
    request: Request, exc: DataSourceUnavailableError
) -> JSONResponse:
    """Map DataSourceUnavailableError to HTTP 503."""
    logger.error("Data source unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


async def _data_fetch_error_handler(request: Request, exc: DataFetchError) -> JSONResponse:
    """Map base DataFetchError to HTTP 502 (catch-all for data errors)."""
    logger.error("Data fetch error: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain exception handlers on the FastAPI application.

    More specific exception types are registered before their base class.
    """
    app.add_exception_handler(TickerNotFoundError, _ticker_not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ProviderTimeoutError, _provider_timeout_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DataSourceUnavailableError, _data_source_unavailable_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DataFetchError, _data_fetch_error_handler)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        path = request.url.path

        level = logging.DEBUG if path in _QUIET_PATHS else logging.INFO
        access_logger.log(
            level,
            "%s %s -> %d (%.1fms)",
            request.method,
            path,
            response.status_code,
            duration_ms,
        )
        return response
