"""Health route: cache reachability and the configured vendor chain."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.services.cache import ServiceCache
from Market_Edge.web.deps import get_aggregator, get_cache

router = APIRouter(prefix="/api", tags=["health"])


class HealthReport(BaseModel):
    """Service dependency status."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    cache: bool
    cache_backend: str
    providers: list[str]


@router.get("/health", response_model=HealthReport)
async def health_check(
    cache: Annotated[ServiceCache, Depends(get_cache)],
    aggregator: Annotated[MarketDataAggregator, Depends(get_aggregator)],
) -> HealthReport:
    """Report whether the cache answers and which vendors are configured.

    Always 200: an unreachable cache only degrades the service.
    """
    return HealthReport(
        cache=await cache.ping(),
        cache_backend=cache.backend,
        providers=aggregator.provider_names,
    )
