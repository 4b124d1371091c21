"""EODHD adapter.

EODHD expects exchange-qualified symbols (``AAPL.US``, ``VOD.L``) in the URL
path and only serves end-of-day history at daily, weekly, or monthly periods.
"""

from __future__ import annotations

import logging
from typing import Final

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services._helpers import date_to_ms, epoch_seconds_to_ms, safe_float
from Market_Edge.services.providers.base import HttpVendorAdapter

logger = logging.getLogger(__name__)

EODHD_BASE_URL: Final[str] = "https://eodhd.com/api"

PERIOD_MAP: Final[dict[str, str]] = {
    "1d": "d",
    "D": "d",
    "1w": "w",
    "W": "w",
    "1mo": "m",
    "M": "m",
}


class EODHDAdapter(HttpVendorAdapter):
    """Real-time quotes and end-of-day bars from eodhd.com."""

    name = "EODHD"
    base_url = EODHD_BASE_URL

    async def get_quote(self, symbol: str, asset_class: AssetClass) -> Quote:
        data = await self._get_json(
            f"/real-time/{symbol}",
            {"api_token": self._api_key, "fmt": "json"},
            symbol=symbol,
        )
        if not data or str(data.get("code")) == "404":
            raise self._not_found(symbol)

        return Quote(
            symbol=symbol,
            price=safe_float(data.get("close")),
            change=safe_float(data.get("change")),
            change_percent=safe_float(data.get("change_p")),
            high=safe_float(data.get("high")),
            low=safe_float(data.get("low")),
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
        data = await self._get_json(
            f"/eod/{symbol}",
            {
                "api_token": self._api_key,
                "fmt": "json",
                "period": PERIOD_MAP.get(interval, "d"),
                "limit": limit,
            },
            symbol=symbol,
        )
        if not isinstance(data, list):
            logger.debug("EODHD returned a non-list history body for %s", symbol)
            return []

        return [
            Bar(
                time=date_to_ms(row["date"]),
                open=safe_float(row.get("open")),
                high=safe_float(row.get("high")),
                low=safe_float(row.get("low")),
                close=safe_float(row.get("close")),
                volume=safe_float(row.get("volume")),
            )
            for row in data[-limit:]
        ]
