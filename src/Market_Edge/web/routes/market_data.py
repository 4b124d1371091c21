"""Market data REST route.

GET /api/market-data: quote (optionally with Stacked Edge) or bar history.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from Market_Edge.analysis.stacked_edge import calculate_stacked_edge
from Market_Edge.models.analysis import ConsensusResult
from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.web.deps import get_aggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["market-data"])

# Stacked Edge always scores daily bars; SMA(200) needs the headroom
STACKED_EDGE_INTERVAL: str = "1d"
STACKED_EDGE_BARS: int = 250


class QuoteWithEdge(Quote):
    """Quote response, carrying the consensus when it was requested."""

    stacked_edge: ConsensusResult | None = None


@router.get(
    "/market-data", response_model=list[Bar] | QuoteWithEdge, response_model_by_alias=True
)
async def get_market_data(
    aggregator: Annotated[MarketDataAggregator, Depends(get_aggregator)],
    symbol: Annotated[str | None, Query()] = None,
    asset_class: Annotated[AssetClass, Query(alias="assetClass")] = AssetClass.STOCK,
    country: Annotated[str, Query()] = "US",
    history: Annotated[bool, Query()] = False,
    interval: Annotated[str, Query()] = "240",
    limit: Annotated[int, Query(ge=1)] = 250,
    stacked_edge: Annotated[bool, Query(alias="stackedEdge")] = False,
) -> list[Bar] | QuoteWithEdge:
    """Return bar history when ``history=true``, otherwise the latest quote.

    With ``stackedEdge=true`` the quote carries a consensus computed from the
    last 250 daily bars. Responds 400 when ``symbol`` is missing.
    """
    if not symbol:
        raise HTTPException(status_code=400, detail="Symbol is required")

    if history:
        return await aggregator.get_history(
            symbol,
            asset_class,
            interval=interval,
            limit=limit,
            country_code=country,
        )

    quote = await aggregator.get_quote(symbol, asset_class, country_code=country)

    edge: ConsensusResult | None = None
    if stacked_edge:
        bars = await aggregator.get_history(
            symbol,
            asset_class,
            interval=STACKED_EDGE_INTERVAL,
            limit=STACKED_EDGE_BARS,
            country_code=country,
        )
        edge = calculate_stacked_edge(bars)
        logger.info("Stacked Edge for %s: %s / %s", symbol, edge.net_bias, edge.phase)

    return QuoteWithEdge(**quote.model_dump(), stacked_edge=edge)
