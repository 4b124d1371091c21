"""Shared test fixtures for the Market Edge test suite.

Provides realistic sample quotes and bar series so tests don't need to
inline large construction blocks.
"""

from collections.abc import Callable

import numpy as np
import pytest

from Market_Edge.models import AssetClass, Bar, Quote

# 2025-01-15 00:00:00 UTC
BASE_TIME_MS: int = 1_736_899_200_000
DAY_MS: int = 86_400_000


def make_bars(closes: list[float] | np.ndarray, *, spread: float = 1.0) -> list[Bar]:
    """Build daily bars around *closes* with a fixed high/low spread."""
    return [
        Bar(
            time=BASE_TIME_MS + i * DAY_MS,
            open=float(close),
            high=float(close) + spread,
            low=float(close) - spread,
            close=float(close),
            volume=1_000_000.0,
        )
        for i, close in enumerate(closes)
    ]


@pytest.fixture()
def sample_quote() -> Quote:
    """A valid quote snapshot for AAPL from Finnhub."""
    return Quote(
        symbol="AAPL",
        price=186.52,
        change=1.27,
        change_percent=0.69,
        high=187.25,
        low=184.10,
        open=185.50,
        previous_close=185.25,
        timestamp=BASE_TIME_MS,
        asset_class=AssetClass.STOCK,
        provider="Finnhub",
    )


@pytest.fixture()
def sample_bars() -> list[Bar]:
    """Three consecutive daily AAPL bars."""
    return [
        Bar(time=BASE_TIME_MS, open=184.0, high=186.0, low=183.5, close=185.5, volume=40e6),
        Bar(
            time=BASE_TIME_MS + DAY_MS,
            open=185.5,
            high=187.25,
            low=184.1,
            close=186.75,
            volume=52.34e6,
        ),
        Bar(
            time=BASE_TIME_MS + 2 * DAY_MS,
            open=186.75,
            high=188.0,
            low=185.9,
            close=187.2,
            volume=45e6,
        ),
    ]


@pytest.fixture()
def uptrend_bars() -> list[Bar]:
    """250 daily bars rising steadily from 100 to 200."""
    return make_bars(np.linspace(100, 200, 250))


@pytest.fixture()
def downtrend_bars() -> list[Bar]:
    """250 daily bars falling steadily from 200 to 100."""
    return make_bars(np.linspace(200, 100, 250))


@pytest.fixture()
def bar_factory() -> Callable[..., list[Bar]]:
    """Factory building daily bars from a close series."""
    return make_bars
