"""Market-data vendor adapters, one module per vendor."""

from Market_Edge.services.providers.base import HttpVendorAdapter, VendorAdapter
from Market_Edge.services.providers.eodhd import EODHDAdapter
from Market_Edge.services.providers.finnhub import FinnhubAdapter, format_finnhub_symbol
from Market_Edge.services.providers.fmp import FMPAdapter, format_fmp_symbol
from Market_Edge.services.providers.twelvedata import TwelveDataAdapter

__all__ = [
    "EODHDAdapter",
    "FMPAdapter",
    "FinnhubAdapter",
    "HttpVendorAdapter",
    "TwelveDataAdapter",
    "VendorAdapter",
    "format_finnhub_symbol",
    "format_fmp_symbol",
]
