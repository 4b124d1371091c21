"""Pydantic v2 models, enums, and type definitions.

Re-exports all public models so consumers can import directly:
    from Market_Edge.models import Quote, Bar, ConsensusResult
"""

from Market_Edge.models.analysis import MAX_SCORE, ConsensusResult, IndicatorVote
from Market_Edge.models.enums import AssetClass, MarketPhase, SignalDirection
from Market_Edge.models.market_data import Bar, BarSeries, Quote
from Market_Edge.models.streaming import ClientMessage, QuoteMessage

__all__ = [
    # Enums
    "AssetClass",
    "MarketPhase",
    "SignalDirection",
    # Market data
    "Bar",
    "BarSeries",
    "Quote",
    # Analysis
    "MAX_SCORE",
    "ConsensusResult",
    "IndicatorVote",
    # Streaming
    "ClientMessage",
    "QuoteMessage",
]
