"""Volatility indicators: Bollinger Bands.

All functions take pandas Series in, return pandas DataFrames out.
NaN for warmup period, never filled or dropped.
"""

import pandas as pd

from Market_Edge.indicators.moving_averages import sma


def bollinger_bands(
    close: pd.Series,
    period: int = 20,
    num_std: float = 2.0,
) -> pd.DataFrame:
    """Bollinger Bands around a simple moving average.

    Uses population stddev (ddof=0).
    Warmup: first ``period - 1`` rows are NaN in every column.

    Formula:
        middle = SMA(close, period)
        upper  = middle + num_std * stddev(close, period, ddof=0)
        lower  = middle - num_std * stddev(close, period, ddof=0)

    Reference: John Bollinger, "Bollinger on Bollinger Bands" (2001).
    """
    middle = sma(close, period)
    std = close.astype(float).rolling(window=period).std(ddof=0)
    return pd.DataFrame(
        {
            "middle": middle,
            "upper": middle + num_std * std,
            "lower": middle - num_std * std,
        },
        index=close.index,
    )
