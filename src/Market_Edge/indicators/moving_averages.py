"""Moving average indicators: SMA, EMA, cumulative VWAP.

All functions take pandas Series in, return pandas Series out.
NaN for warmup period, never filled or dropped.
"""

import numpy as np
import pandas as pd


def sma(
    close: pd.Series,
    period: int,
) -> pd.Series:
    """Simple moving average: mean of the last ``period`` values.

    Warmup: first ``period - 1`` values are NaN. A series shorter than the
    period is entirely NaN.

    Example:
        ``sma([1, 2, 3, 4, 5], 3)`` -> ``[NaN, NaN, 2, 3, 4]``
    """
    result: pd.Series = close.astype(float).rolling(window=period).mean()
    return result


def ema(
    close: pd.Series,
    period: int,
) -> pd.Series:
    """Exponential moving average seeded with the first input value.

    Formula:
        k = 2 / (period + 1)
        ema[0] = close[0]
        ema[i] = close[i] * k + ema[i-1] * (1 - k)

    No warmup: the first value is defined. ``ewm(span=period, adjust=False)``
    implements exactly this recursion.
    """
    result: pd.Series = close.astype(float).ewm(span=period, adjust=False).mean()
    return result


def vwap(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    volume: pd.Series,
) -> pd.Series:
    """Cumulative volume-weighted average price over the whole input.

    typical = (high + low + close) / 3
    VWAP    = cumsum(typical * volume) / cumsum(volume)

    Not a rolling window: callers control the anchor by how much history they
    pass in. NaN while cumulative volume is 0.
    """
    typical = (high + low + close) / 3.0
    cum_value = (typical * volume).cumsum()
    cum_volume = volume.astype(float).cumsum()

    # Guard division by zero when cumulative volume is 0
    result: pd.Series = cum_value / cum_volume.replace(0.0, np.nan)
    return result
