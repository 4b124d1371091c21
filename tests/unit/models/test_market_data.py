"""Tests for market data models: Bar, Quote, BarSeries.

Covers:
- Valid construction and frozen immutability
- Quote requires a known asset class
- Quote dumps and parses camelCase keys, and still accepts field names
- BarSeries parses and dumps JSON arrays in order
"""

import pytest
from pydantic import ValidationError

from Market_Edge.models import AssetClass, Bar, BarSeries, Quote


class TestBar:
    """Tests for the OHLCV bar model."""

    def test_valid_construction(self, sample_bars: list[Bar]) -> None:
        bar = sample_bars[1]
        assert bar.close == 186.75
        assert bar.volume == 52.34e6

    def test_frozen(self, sample_bars: list[Bar]) -> None:
        with pytest.raises(ValidationError):
            sample_bars[0].close = 1.0  # type: ignore[misc]

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Bar.model_validate({"time": 0, "open": 1, "high": 1, "low": 1, "close": 1})

    def test_zero_volume_allowed(self) -> None:
        bar = Bar(time=0, open=1, high=1, low=1, close=1, volume=0)
        assert bar.volume == 0.0


class TestQuote:
    """Tests for the Quote snapshot model."""

    def test_asset_class_from_string(self, sample_quote: Quote) -> None:
        data = sample_quote.model_dump()
        data["asset_class"] = "crypto"
        assert Quote.model_validate(data).asset_class is AssetClass.CRYPTO

    def test_unknown_asset_class_rejected(self, sample_quote: Quote) -> None:
        data = sample_quote.model_dump()
        data["asset_class"] = "bond"
        with pytest.raises(ValidationError):
            Quote.model_validate(data)

    def test_dump_uses_camel_case_keys(self, sample_quote: Quote) -> None:
        dumped = sample_quote.model_dump(mode="json", by_alias=True)
        assert dumped["assetClass"] == "stock"
        assert dumped["changePercent"] == 0.69
        assert dumped["previousClose"] == 185.25
        assert dumped["provider"] == "Finnhub"

    def test_parses_camel_case_payload(self, sample_quote: Quote) -> None:
        restored = Quote.model_validate_json(sample_quote.model_dump_json(by_alias=True))
        assert restored == sample_quote

    def test_frozen(self, sample_quote: Quote) -> None:
        with pytest.raises(ValidationError):
            sample_quote.price = 1.0  # type: ignore[misc]


class TestBarSeries:
    """Tests for the list[Bar] adapter used by the cache."""

    def test_preserves_order(self, sample_bars: list[Bar]) -> None:
        restored = BarSeries.validate_json(BarSeries.dump_json(sample_bars))
        assert [bar.time for bar in restored] == [bar.time for bar in sample_bars]

    def test_rejects_non_list(self) -> None:
        with pytest.raises(ValidationError):
            BarSeries.validate_json(b'{"time": 0}')
