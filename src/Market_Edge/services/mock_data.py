"""Synthesized placeholder quotes and bars.

Used when no vendor is configured or every vendor failed, so callers always
get data of the right shape. Values are random; the shape is fixed.
"""

from __future__ import annotations

from typing import Final

import numpy as np

from Market_Edge.models.enums import AssetClass
from Market_Edge.models.market_data import Bar, Quote
from Market_Edge.services._helpers import interval_seconds, now_ms

MOCK_PROVIDER: Final[str] = "Mock"

_rng = np.random.default_rng()


def mock_quote(symbol: str, asset_class: AssetClass) -> Quote:
    """Return a synthetic quote whose ``provider`` is ``"Mock"``."""
    return Quote(
        symbol=symbol,
        price=float(100 + _rng.random() * 50),
        change=float(_rng.random() * 5 - 2.5),
        change_percent=float(_rng.random() * 2 - 1),
        high=160.0,
        low=140.0,
        open=150.0,
        previous_close=149.0,
        timestamp=now_ms(),
        asset_class=asset_class,
        provider=MOCK_PROVIDER,
    )


def mock_history(limit: int, interval: str = "1d") -> list[Bar]:
    """Return *limit* synthetic bars spaced by *interval*, oldest first.

    Unknown intervals fall back to daily spacing.
    """
    step = interval_seconds(interval) * 1000
    now = now_ms()
    return [
        Bar(
            time=now - (limit - i) * step,
            open=float(150 + _rng.random() * 10),
            high=float(165 + _rng.random() * 5),
            low=float(145 - _rng.random() * 5),
            close=float(155 + _rng.random() * 10),
            volume=float(1_000_000 + _rng.random() * 500_000),
        )
        for i in range(limit)
    ]
