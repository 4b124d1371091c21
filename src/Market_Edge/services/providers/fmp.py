"""Financial Modeling Prep adapter.

FMP drops the slash from pairs (``EUR/USD`` -> ``EURUSD``), returns quotes as
a one-element list, and serves daily and intraday history from different
endpoints, both newest first.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services._helpers import date_to_ms, epoch_seconds_to_ms, safe_float
from Market_Edge.services.providers.base import HttpVendorAdapter

logger = logging.getLogger(__name__)

FMP_BASE_URL: Final[str] = "https://financialmodelingprep.com/stable"

DAILY_INTERVALS: Final[frozenset[str]] = frozenset({"1d", "D", "1w", "W", "1mo", "M"})

INTRADAY_INTERVAL_MAP: Final[dict[str, str]] = {
    "5m": "5min",
    "15m": "15min",
    "30m": "30min",
    "1h": "1hour",
    "4h": "4hour",
    "5": "5min",
    "15": "15min",
    "30": "30min",
    "60": "1hour",
    "240": "4hour",
}
DEFAULT_INTRADAY_INTERVAL: Final[str] = "1hour"


def format_fmp_symbol(symbol: str) -> str:
    """Strip the pair separator: ``BTC/USD`` -> ``BTCUSD``."""
    return symbol.replace("/", "")


class FMPAdapter(HttpVendorAdapter):
    """Quotes and price history from financialmodelingprep.com."""

    name = "Financial Modeling Prep"
    base_url = FMP_BASE_URL

    async def get_quote(self, symbol: str, asset_class: AssetClass) -> Quote:
        data = await self._get_json(
            "/quote",
            {"symbol": format_fmp_symbol(symbol), "apikey": self._api_key},
            symbol=symbol,
        )
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise self._not_found(symbol)

        return Quote(
            symbol=symbol,
            price=safe_float(data.get("price")),
            change=safe_float(data.get("change")),
            change_percent=safe_float(
                data.get("changePercentage") or data.get("changesPercentage")
            ),
            high=safe_float(data.get("dayHigh")),
            low=safe_float(data.get("dayLow")),
            open=safe_float(data.get("open")),
            previous_close=safe_float(data.get("previousClose")),
            timestamp=epoch_seconds_to_ms(data.get("timestamp")),
            asset_class=asset_class,
            provider=self.name,
        )

    async def get_history(
        self,
        symbol: str,
        asset_class: AssetClass,
        interval: str,
        limit: int,
    ) -> list[Bar]:
        vendor_symbol = format_fmp_symbol(symbol)
        params: dict[str, Any] = {"symbol": vendor_symbol, "apikey": self._api_key}

        if interval in DAILY_INTERVALS:
            path = "/historical-price-eod/full"
        else:
            fmp_interval = INTRADAY_INTERVAL_MAP.get(interval, DEFAULT_INTRADAY_INTERVAL)
            path = f"/historical-chart/{fmp_interval}"

        data = await self._get_json(path, params, symbol=symbol)

        # Older responses wrap the rows as {"symbol": ..., "historical": [...]}
        rows: list[dict[str, Any]] = data.get("historical", []) if isinstance(data, dict) else data

        bars = [
            Bar(
                time=date_to_ms(row["date"]),
                open=safe_float(row.get("open")),
                high=safe_float(row.get("high")),
                low=safe_float(row.get("low")),
                close=safe_float(row.get("close")),
                volume=safe_float(row.get("volume")),
            )
            for row in rows[:limit]
        ]
        bars.reverse()
        return bars
