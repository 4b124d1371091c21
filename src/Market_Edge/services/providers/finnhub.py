"""Finnhub adapter.

Finnhub wants exchange-prefixed symbols for non-equities (``BINANCE:BTCUSDT``,
``OANDA:EUR_USD``) and answers a quote with single-letter fields. Candles come
back as parallel arrays, oldest first.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Final

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services._helpers import epoch_seconds_to_ms, interval_seconds, safe_float
from Market_Edge.services.providers.base import HttpVendorAdapter

logger = logging.getLogger(__name__)

FINNHUB_BASE_URL: Final[str] = "https://finnhub.io/api/v1"

CRYPTO_SYMBOL_MAP: Final[dict[str, str]] = {
    "BTC/USD": "BINANCE:BTCUSDT",
    "ETH/USD": "BINANCE:ETHUSDT",
    "SOL/USD": "BINANCE:SOLUSDT",
    "XRP/USD": "BINANCE:XRPUSDT",
    "ADA/USD": "BINANCE:ADAUSDT",
    "DOGE/USD": "BINANCE:DOGEUSDT",
    "DOT/USD": "BINANCE:DOTUSDT",
    "AVAX/USD": "BINANCE:AVAXUSDT",
    "MATIC/USD": "BINANCE:MATICUSDT",
    "LINK/USD": "BINANCE:LINKUSDT",
    "LTC/USD": "BINANCE:LTCUSDT",
    "UNI/USD": "BINANCE:UNIUSDT",
    "ATOM/USD": "BINANCE:ATOMUSDT",
}

# Finnhub has no 4h resolution; 4h requests are served hourly
RESOLUTION_MAP: Final[dict[str, str]] = {
    "5m": "5",
    "15m": "15",
    "30m": "30",
    "1h": "60",
    "4h": "60",
    "1d": "D",
    "1w": "W",
    "1mo": "M",
    "5": "5",
    "15": "15",
    "30": "30",
    "60": "60",
    "240": "60",
    "D": "D",
    "W": "W",
    "M": "M",
}

_CRYPTO_PAIR = re.compile(r"^([A-Z]+)/USD$")
_FOREX_PAIR = re.compile(r"^([A-Z]+)/([A-Z]+)$")


def format_finnhub_symbol(symbol: str, asset_class: AssetClass) -> str:
    """Translate a generic symbol into Finnhub's notation.

    ``BTC/USD`` -> ``BINANCE:BTCUSDT``, ``EUR/USD`` -> ``OANDA:EUR_USD``;
    equities pass through unchanged.
    """
    if asset_class is AssetClass.CRYPTO:
        if symbol in CRYPTO_SYMBOL_MAP:
            return CRYPTO_SYMBOL_MAP[symbol]
        match = _CRYPTO_PAIR.match(symbol)
        return f"BINANCE:{match.group(1)}USDT" if match else symbol

    if asset_class is AssetClass.FOREX:
        match = _FOREX_PAIR.match(symbol)
        return f"OANDA:{match.group(1)}_{match.group(2)}" if match else symbol

    return symbol


class FinnhubAdapter(HttpVendorAdapter):
    """Quotes and candles from finnhub.io."""

    name = "Finnhub"
    base_url = FINNHUB_BASE_URL

    async def get_quote(self, symbol: str, asset_class: AssetClass) -> Quote:
        vendor_symbol = format_finnhub_symbol(symbol, asset_class)
        data = await self._get_json(
            "/quote",
            {"symbol": vendor_symbol, "token": self._api_key},
            symbol=symbol,
        )

        price = safe_float(data.get("c"))
        # An all-zero quote is Finnhub's way of saying it does not cover the symbol
        if price == 0:
            raise self._not_found(symbol, vendor_symbol)

        return Quote(
            symbol=symbol,
            price=price,
            change=safe_float(data.get("d")),
            change_percent=safe_float(data.get("dp")),
            high=safe_float(data.get("h")),
            low=safe_float(data.get("l")),
            open=safe_float(data.get("o")),
            previous_close=safe_float(data.get("pc")),
            timestamp=epoch_seconds_to_ms(data.get("t")),
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
        vendor_symbol = format_finnhub_symbol(symbol, asset_class)
        to_ts = int(time.time())
        from_ts = to_ts - interval_seconds(interval) * limit

        path = "/stock/candle"
        if asset_class is AssetClass.CRYPTO:
            path = "/crypto/candle"
        elif asset_class is AssetClass.FOREX:
            path = "/forex/candle"

        data = await self._get_json(
            path,
            {
                "symbol": vendor_symbol,
                "resolution": RESOLUTION_MAP.get(interval, "D"),
                "from": from_ts,
                "to": to_ts,
                "token": self._api_key,
            },
            symbol=symbol,
        )

        if data.get("s") != "ok":
            logger.debug("Finnhub candle status %r for %s", data.get("s"), vendor_symbol)
            return []

        return [
            Bar(
                time=int(ts) * 1000,
                open=safe_float(o),
                high=safe_float(h),
                low=safe_float(lo),
                close=safe_float(c),
                volume=safe_float(v),
            )
            for ts, o, h, lo, c, v in zip(
                data["t"], data["o"], data["h"], data["l"], data["c"], data["v"], strict=False
            )
        ]
