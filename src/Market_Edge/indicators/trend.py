"""Trend indicators: True Range, ADX.

All functions take pandas Series in, return pandas Series out.
NaN for warmup period, never filled or dropped.
"""

import numpy as np
import pandas as pd

from Market_Edge.indicators.moving_averages import ema


def true_range(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
) -> pd.Series:
    """True Range = max(high - low, |high - prev_close|, |low - prev_close|).

    The first bar has no previous close, so it falls back to high - low.
    """
    prev_close = close.shift(1)
    tr1 = high - low
    tr2 = (high - prev_close).abs()
    tr3 = (low - prev_close).abs()
    result: pd.Series = pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)
    return result


def adx(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """Average Directional Index with EMA smoothing.

    Steps:
        1. Compute +DM and -DM from consecutive high/low deltas.
        2. Smooth +DM, -DM, and TR with EMA(period), seeded at the first delta.
        3. +DI = smoothed_+DM / smoothed_TR * 100.
        4. -DI = smoothed_-DM / smoothed_TR * 100.
        5. DX = |+DI - -DI| / (+DI + -DI) * 100, 0 where undefined.
        6. ADX = EMA(period) of DX.

    Warmup: first value is NaN (directional movement needs a prior bar).

    Reference: Wilder (1978) "New Concepts in Technical Trading Systems".
    """
    n = len(close)
    out = np.full(n, np.nan)
    if n < 2:  # noqa: PLR2004
        return pd.Series(out, index=close.index)

    # +DM and -DM
    high_diff = high.diff()
    low_diff = -low.diff()  # Note: negative of diff because we want low[i-1] - low[i]

    plus_dm = pd.Series(
        np.where((high_diff > low_diff) & (high_diff > 0), high_diff, 0.0),
        index=close.index,
    ).iloc[1:]
    minus_dm = pd.Series(
        np.where((low_diff > high_diff) & (low_diff > 0), low_diff, 0.0),
        index=close.index,
    ).iloc[1:]
    tr = true_range(high, low, close).iloc[1:]

    smoothed_plus_dm = ema(plus_dm, period)
    smoothed_minus_dm = ema(minus_dm, period)
    smoothed_tr = ema(tr, period)

    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = smoothed_plus_dm / smoothed_tr * 100.0
        minus_di = smoothed_minus_dm / smoothed_tr * 100.0
        dx = (plus_di - minus_di).abs() / (plus_di + minus_di) * 100.0

    # Zero-denominator DX (flat bars) counts as no directional movement
    dx = dx.replace([np.inf, -np.inf], np.nan).fillna(0.0)

    out[1:] = ema(dx, period).to_numpy()
    return pd.Series(out, index=close.index)
