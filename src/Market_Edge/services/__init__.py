"""Market data aggregation and caching services.

Re-exports all public service classes so consumers can import directly:
    from Market_Edge.services import MarketDataAggregator, ServiceCache
"""

from Market_Edge.services.aggregator import MarketDataAggregator
from Market_Edge.services.cache import TTL_HISTORY, TTL_QUOTE, CacheEntry, ServiceCache
from Market_Edge.services.mock_data import MOCK_PROVIDER, mock_history, mock_quote
from Market_Edge.services.symbols import (
    EXCHANGE_PRIORITY,
    format_symbol_for_country,
    get_priority_exchanges,
)

__all__ = [
    # Infrastructure
    "CacheEntry",
    "ServiceCache",
    "TTL_HISTORY",
    "TTL_QUOTE",
    # Data services
    "MarketDataAggregator",
    # Fallback data
    "MOCK_PROVIDER",
    "mock_history",
    "mock_quote",
    # Symbols
    "EXCHANGE_PRIORITY",
    "format_symbol_for_country",
    "get_priority_exchanges",
]
