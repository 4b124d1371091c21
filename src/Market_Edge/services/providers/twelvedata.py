"""Twelve Data adapter.

Twelve Data reports errors in-band (HTTP 200 with ``"status": "error"``) and
returns numeric fields as strings. Time series arrive newest first.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services._helpers import date_to_ms, epoch_seconds_to_ms, safe_float
from Market_Edge.services.providers.base import HttpVendorAdapter
from Market_Edge.utils.exceptions import DataSourceUnavailableError

logger = logging.getLogger(__name__)

TWELVE_DATA_BASE_URL: Final[str] = "https://api.twelvedata.com"

INTERVAL_MAP: Final[dict[str, str]] = {
    "5m": "5min",
    "15m": "15min",
    "30m": "30min",
    "1h": "1h",
    "4h": "4h",
    "1d": "1day",
    "1w": "1week",
    "1mo": "1month",
    "5": "5min",
    "15": "15min",
    "30": "30min",
    "60": "1h",
    "240": "4h",
    "D": "1day",
    "W": "1week",
    "M": "1month",
}


class TwelveDataAdapter(HttpVendorAdapter):
    """Quotes and time series from twelvedata.com."""

    name = "Twelve Data"
    base_url = TWELVE_DATA_BASE_URL

    def _check_status(self, data: dict[str, Any], symbol: str) -> None:
        if data.get("status") == "error":
            msg = f"Twelve Data error for {symbol}: {data.get('message', 'unknown error')}"
            raise DataSourceUnavailableError(
                msg,
                symbol=symbol,
                source=self.name,
            )

    async def get_quote(self, symbol: str, asset_class: AssetClass) -> Quote:
        data = await self._get_json(
            "/quote",
            {"symbol": symbol, "apikey": self._api_key},
            symbol=symbol,
        )
        self._check_status(data, symbol)

        return Quote(
            symbol=symbol,
            price=safe_float(data.get("close")),
            change=safe_float(data.get("change")),
            change_percent=safe_float(data.get("percent_change")),
            high=safe_float(data.get("high")),
            low=safe_float(data.get("low")),
            open=safe_float(data.get("open")),
            previous_close=safe_float(data.get("previous_close")),
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
        data = await self._get_json(
            "/time_series",
            {
                "symbol": symbol,
                "interval": INTERVAL_MAP.get(interval, interval),
                "outputsize": limit,
                "apikey": self._api_key,
            },
            symbol=symbol,
        )
        self._check_status(data, symbol)

        bars = [
            Bar(
                time=date_to_ms(value["datetime"]),
                open=safe_float(value.get("open")),
                high=safe_float(value.get("high")),
                # Some series omit the low; fall back to the close
                low=safe_float(value.get("low")) or safe_float(value.get("close")),
                close=safe_float(value.get("close")),
                volume=safe_float(value.get("volume")),
            )
            for value in data.get("values", [])
        ]
        bars.reverse()
        return bars
