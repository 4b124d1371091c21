"""Tests for the vendor adapters over a mocked HTTP transport.

All HTTP goes through httpx.MockTransport. No real API calls.

Covers:
- Finnhub symbol translation, quote parsing, zero-price "not found", candles
- Twelve Data in-band errors, string numerics, newest-first reversal
- FMP list-wrapped quotes, daily vs intraday endpoints, both history shapes
- EODHD path symbols, 404 codes, non-list history bodies
- Shared transport behavior: 404 -> TickerNotFoundError, 5xx / non-JSON /
  connection errors -> DataSourceUnavailableError
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from Market_Edge.models import AssetClass
from Market_Edge.services.providers import (
    EODHDAdapter,
    FinnhubAdapter,
    FMPAdapter,
    TwelveDataAdapter,
    VendorAdapter,
    format_finnhub_symbol,
    format_fmp_symbol,
)
from Market_Edge.utils.exceptions import (
    DataSourceUnavailableError,
    ProviderTimeoutError,
    TickerNotFoundError,
)

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport:
    """Serve canned responses and remember every request."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_response(body: Any, status_code: int = 200) -> Handler:
    return lambda _request: httpx.Response(status_code, json=body)


# ---------------------------------------------------------------------------
# Finnhub
# ---------------------------------------------------------------------------


class TestFinnhubSymbols:
    """Tests for format_finnhub_symbol()."""

    @pytest.mark.parametrize(
        ("symbol", "asset_class", "expected"),
        [
            ("BTC/USD", AssetClass.CRYPTO, "BINANCE:BTCUSDT"),
            ("PEPE/USD", AssetClass.CRYPTO, "BINANCE:PEPEUSDT"),
            ("EUR/USD", AssetClass.FOREX, "OANDA:EUR_USD"),
            ("AAPL", AssetClass.STOCK, "AAPL"),
        ],
    )
    def test_translation(self, symbol: str, asset_class: AssetClass, expected: str) -> None:
        assert format_finnhub_symbol(symbol, asset_class) == expected


class TestFinnhubAdapter:
    """Tests for FinnhubAdapter."""

    @pytest.mark.asyncio()
    async def test_quote_parsed(self) -> None:
        transport = RecordingTransport(
            json_response(
                {
                    "c": 186.52,
                    "d": 1.27,
                    "dp": 0.69,
                    "h": 187.25,
                    "l": 184.1,
                    "o": 185.5,
                    "pc": 185.25,
                    "t": 1_736_899_200,
                }
            )
        )
        adapter = FinnhubAdapter("key", client=transport.client())

        quote = await adapter.get_quote("AAPL", AssetClass.STOCK)

        assert quote.price == 186.52
        assert quote.previous_close == 185.25
        assert quote.timestamp == 1_736_899_200_000
        assert quote.provider == "Finnhub"
        request = transport.requests[0]
        assert request.url.path == "/api/v1/quote"
        assert request.url.params["symbol"] == "AAPL"
        assert request.url.params["token"] == "key"

    @pytest.mark.asyncio()
    async def test_crypto_quote_uses_exchange_symbol(self) -> None:
        transport = RecordingTransport(json_response({"c": 97_000.0, "t": 1}))
        adapter = FinnhubAdapter("key", client=transport.client())

        quote = await adapter.get_quote("BTC/USD", AssetClass.CRYPTO)

        assert quote.symbol == "BTC/USD"
        assert transport.requests[0].url.params["symbol"] == "BINANCE:BTCUSDT"

    @pytest.mark.asyncio()
    async def test_zero_price_is_not_found(self) -> None:
        adapter = FinnhubAdapter(
            "key",
            client=RecordingTransport(json_response({"c": 0, "d": None})).client(),
        )
        with pytest.raises(TickerNotFoundError):
            await adapter.get_quote("ZZZZ", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_candles_parsed(self) -> None:
        transport = RecordingTransport(
            json_response(
                {
                    "s": "ok",
                    "t": [1_736_899_200, 1_736_985_600],
                    "o": [184.0, 185.5],
                    "h": [186.0, 187.25],
                    "l": [183.5, 184.1],
                    "c": [185.5, 186.75],
                    "v": [40e6, 52e6],
                }
            )
        )
        adapter = FinnhubAdapter("key", client=transport.client())

        bars = await adapter.get_history("AAPL", AssetClass.STOCK, "1d", 2)

        assert [bar.time for bar in bars] == [1_736_899_200_000, 1_736_985_600_000]
        assert bars[1].close == 186.75
        params = transport.requests[0].url.params
        assert transport.requests[0].url.path == "/api/v1/stock/candle"
        assert params["resolution"] == "D"
        assert int(params["to"]) - int(params["from"]) == 2 * 86_400

    @pytest.mark.asyncio()
    async def test_forex_candles_endpoint(self) -> None:
        transport = RecordingTransport(json_response({"s": "no_data"}))
        adapter = FinnhubAdapter("key", client=transport.client())

        bars = await adapter.get_history("EUR/USD", AssetClass.FOREX, "240", 10)

        assert bars == []
        assert transport.requests[0].url.path == "/api/v1/forex/candle"
        assert transport.requests[0].url.params["resolution"] == "60"


# ---------------------------------------------------------------------------
# Twelve Data
# ---------------------------------------------------------------------------


class TestTwelveDataAdapter:
    """Tests for TwelveDataAdapter."""

    @pytest.mark.asyncio()
    async def test_quote_string_numerics(self) -> None:
        transport = RecordingTransport(
            json_response(
                {
                    "symbol": "AAPL",
                    "close": "186.52",
                    "change": "1.27",
                    "percent_change": "0.69",
                    "high": "187.25",
                    "low": "184.10",
                    "open": "185.50",
                    "previous_close": "185.25",
                    "timestamp": 1_736_899_200,
                }
            )
        )
        adapter = TwelveDataAdapter("key", client=transport.client())

        quote = await adapter.get_quote("AAPL", AssetClass.STOCK)

        assert quote.price == 186.52
        assert quote.change_percent == 0.69
        assert quote.provider == "Twelve Data"
        assert transport.requests[0].url.params["apikey"] == "key"

    @pytest.mark.asyncio()
    async def test_in_band_error(self) -> None:
        adapter = TwelveDataAdapter(
            "key",
            client=RecordingTransport(
                json_response({"status": "error", "code": 429, "message": "rate limit"})
            ).client(),
        )
        with pytest.raises(DataSourceUnavailableError, match="rate limit"):
            await adapter.get_quote("AAPL", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_time_series_reversed_to_oldest_first(self) -> None:
        transport = RecordingTransport(
            json_response(
                {
                    "status": "ok",
                    "values": [
                        {
                            "datetime": "2025-01-16",
                            "open": "185.5",
                            "high": "187.25",
                            "low": "184.1",
                            "close": "186.75",
                            "volume": "52000000",
                        },
                        {
                            "datetime": "2025-01-15",
                            "open": "184.0",
                            "high": "186.0",
                            "close": "185.5",
                            "volume": "40000000",
                        },
                    ],
                }
            )
        )
        adapter = TwelveDataAdapter("key", client=transport.client())

        bars = await adapter.get_history("AAPL", AssetClass.STOCK, "1d", 2)

        assert [bar.time for bar in bars] == [1_736_899_200_000, 1_736_985_600_000]
        # Missing low falls back to the close
        assert bars[0].low == 185.5
        params = transport.requests[0].url.params
        assert params["interval"] == "1day"
        assert params["outputsize"] == "2"


# ---------------------------------------------------------------------------
# FMP
# ---------------------------------------------------------------------------


class TestFMPAdapter:
    """Tests for FMPAdapter."""

    def test_symbol_format(self) -> None:
        assert format_fmp_symbol("EUR/USD") == "EURUSD"
        assert format_fmp_symbol("AAPL") == "AAPL"

    @pytest.mark.asyncio()
    async def test_quote_from_list(self) -> None:
        transport = RecordingTransport(
            json_response(
                [
                    {
                        "symbol": "EURUSD",
                        "price": 1.0421,
                        "change": 0.0012,
                        "changePercentage": 0.115,
                        "dayHigh": 1.045,
                        "dayLow": 1.039,
                        "open": 1.0409,
                        "previousClose": 1.0409,
                        "timestamp": 1_736_899_200,
                    }
                ]
            )
        )
        adapter = FMPAdapter("key", client=transport.client())

        quote = await adapter.get_quote("EUR/USD", AssetClass.FOREX)

        assert quote.symbol == "EUR/USD"
        assert quote.price == 1.0421
        assert quote.change_percent == 0.115
        assert transport.requests[0].url.params["symbol"] == "EURUSD"

    @pytest.mark.asyncio()
    async def test_empty_quote_list_not_found(self) -> None:
        adapter = FMPAdapter("key", client=RecordingTransport(json_response([])).client())
        with pytest.raises(TickerNotFoundError):
            await adapter.get_quote("ZZZZ", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_daily_history_wrapped_shape(self) -> None:
        rows = [
            {"date": "2025-01-17", "open": 3, "high": 3, "low": 3, "close": 3, "volume": 1},
            {"date": "2025-01-16", "open": 2, "high": 2, "low": 2, "close": 2, "volume": 1},
            {"date": "2025-01-15", "open": 1, "high": 1, "low": 1, "close": 1, "volume": 1},
        ]
        transport = RecordingTransport(json_response({"symbol": "AAPL", "historical": rows}))
        adapter = FMPAdapter("key", client=transport.client())

        bars = await adapter.get_history("AAPL", AssetClass.STOCK, "1d", 2)

        # Newest two rows, returned oldest first
        assert [bar.close for bar in bars] == [2.0, 3.0]
        assert transport.requests[0].url.path == "/stable/historical-price-eod/full"

    @pytest.mark.asyncio()
    async def test_intraday_history_list_shape(self) -> None:
        rows = [
            {"date": "2025-01-15 14:00:00", "open": 2, "high": 2, "low": 2, "close": 2},
            {"date": "2025-01-15 10:00:00", "open": 1, "high": 1, "low": 1, "close": 1},
        ]
        transport = RecordingTransport(json_response(rows))
        adapter = FMPAdapter("key", client=transport.client())

        bars = await adapter.get_history("AAPL", AssetClass.STOCK, "240", 10)

        assert [bar.close for bar in bars] == [1.0, 2.0]
        assert bars[0].volume == 0.0
        assert transport.requests[0].url.path == "/stable/historical-chart/4hour"


# ---------------------------------------------------------------------------
# EODHD
# ---------------------------------------------------------------------------


class TestEODHDAdapter:
    """Tests for EODHDAdapter."""

    @pytest.mark.asyncio()
    async def test_quote_symbol_in_path(self) -> None:
        transport = RecordingTransport(
            json_response(
                {
                    "code": "VOD.L",
                    "timestamp": 1_736_899_200,
                    "open": 68.5,
                    "high": 69.1,
                    "low": 68.2,
                    "close": 68.9,
                    "previousClose": 68.4,
                    "change": 0.5,
                    "change_p": 0.73,
                }
            )
        )
        adapter = EODHDAdapter("key", client=transport.client())

        quote = await adapter.get_quote("VOD.L", AssetClass.STOCK)

        assert quote.price == 68.9
        assert quote.change_percent == 0.73
        assert transport.requests[0].url.path == "/api/real-time/VOD.L"
        assert transport.requests[0].url.params["api_token"] == "key"

    @pytest.mark.asyncio()
    async def test_quote_code_404_not_found(self) -> None:
        adapter = EODHDAdapter(
            "key", client=RecordingTransport(json_response({"code": 404})).client()
        )
        with pytest.raises(TickerNotFoundError):
            await adapter.get_quote("ZZZZ.US", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_history_keeps_last_rows(self) -> None:
        rows = [
            {"date": f"2025-01-{day:02d}", "open": day, "high": day, "low": day, "close": day}
            for day in (13, 14, 15)
        ]
        transport = RecordingTransport(json_response(rows))
        adapter = EODHDAdapter("key", client=transport.client())

        bars = await adapter.get_history("AAPL.US", AssetClass.STOCK, "1w", 2)

        assert [bar.close for bar in bars] == [14.0, 15.0]
        assert transport.requests[0].url.params["period"] == "w"

    @pytest.mark.asyncio()
    async def test_history_non_list_is_empty(self) -> None:
        adapter = EODHDAdapter(
            "key", client=RecordingTransport(json_response({"errors": "bad"})).client()
        )
        assert await adapter.get_history("AAPL.US", AssetClass.STOCK, "1d", 5) == []


# ---------------------------------------------------------------------------
# Shared transport behavior
# ---------------------------------------------------------------------------


class TestTransportErrors:
    """Status and transport failures map onto the DataFetchError hierarchy."""

    @pytest.mark.asyncio()
    async def test_http_404_not_found(self) -> None:
        adapter = FMPAdapter("key", client=RecordingTransport(json_response({}, 404)).client())
        with pytest.raises(TickerNotFoundError) as exc_info:
            await adapter.get_quote("ZZZZ", AssetClass.STOCK)
        assert exc_info.value.http_status == 404
        assert exc_info.value.source == "Financial Modeling Prep"

    @pytest.mark.asyncio()
    async def test_http_500_unavailable(self) -> None:
        adapter = FinnhubAdapter("key", client=RecordingTransport(json_response({}, 500)).client())
        with pytest.raises(DataSourceUnavailableError) as exc_info:
            await adapter.get_quote("AAPL", AssetClass.STOCK)
        assert exc_info.value.http_status == 500

    @pytest.mark.asyncio()
    async def test_non_json_body_unavailable(self) -> None:
        transport = RecordingTransport(lambda _r: httpx.Response(200, text="<html>"))
        adapter = TwelveDataAdapter("key", client=transport.client())
        with pytest.raises(DataSourceUnavailableError):
            await adapter.get_quote("AAPL", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_connection_error_unavailable(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        adapter = EODHDAdapter("key", client=RecordingTransport(refuse).client())
        with pytest.raises(DataSourceUnavailableError):
            await adapter.get_quote("AAPL.US", AssetClass.STOCK)

    @pytest.mark.asyncio()
    async def test_read_timeout_is_provider_timeout(self) -> None:
        def stall(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        adapter = FinnhubAdapter("key", client=RecordingTransport(stall).client())
        with pytest.raises(ProviderTimeoutError) as exc_info:
            await adapter.get_quote("AAPL", AssetClass.STOCK)
        assert exc_info.value.source == "Finnhub"

    def test_adapters_satisfy_protocol(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(json_response({})))
        for adapter_cls in (FinnhubAdapter, TwelveDataAdapter, FMPAdapter, EODHDAdapter):
            assert isinstance(adapter_cls("key", client=client), VendorAdapter)
