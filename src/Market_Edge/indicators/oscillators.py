"""Oscillator indicators: RSI, MACD.

All functions take pandas Series in, return pandas Series/DataFrames out.
NaN for warmup period, never filled or dropped.
"""

import numpy as np
import pandas as pd

from Market_Edge.indicators.moving_averages import ema

# RS substituted when the average loss is zero (RSI = 100 - 100/101)
ZERO_LOSS_RS: float = 100.0


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    rs = ZERO_LOSS_RS if avg_loss == 0 else avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi(
    close: pd.Series,
    period: int = 14,
) -> pd.Series:
    """Relative Strength Index with a simple-average seed and Wilder smoothing.

    Steps:
        1. For deltas 1..period accumulate raw gains and losses.
        2. At index ``period`` emit the first RSI from the simple averages.
        3. Beyond ``period``:
           avg = (avg_prev * (period - 1) + current) / period

    When avg_loss = 0 the RS is taken as 100.
    Warmup: first ``period`` values are NaN (index 0 has no prior price).

    Reference: Wilder (1978) "New Concepts in Technical Trading Systems".
    """
    values = close.to_numpy(dtype=float)
    n = len(values)
    out = np.full(n, np.nan)

    gains = 0.0
    losses = 0.0
    avg_gain = 0.0
    avg_loss = 0.0

    # Recursive smoothing carries state, so this cannot be vectorized
    for i in range(1, n):
        diff = values[i] - values[i - 1]
        gain = diff if diff > 0 else 0.0
        loss = -diff if diff < 0 else 0.0

        if i <= period:
            gains += gain
            losses += loss
            if i == period:
                avg_gain = gains / period
                avg_loss = losses / period
                out[i] = _rsi_from_averages(avg_gain, avg_loss)
            continue

        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        out[i] = _rsi_from_averages(avg_gain, avg_loss)

    return pd.Series(out, index=close.index)


def macd(
    close: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> pd.DataFrame:
    """Moving Average Convergence/Divergence.

    Columns:
        macd      = EMA(fast) - EMA(slow)
        signal    = EMA(signal) of the defined MACD values, left-padded with NaN
        histogram = macd - signal

    Reference: Gerald Appel, "Technical Analysis: Power Tools for Active
    Investors" (2005).
    """
    macd_line = ema(close, fast) - ema(close, slow)

    defined = macd_line.dropna()
    signal_line = pd.Series(np.nan, index=close.index, dtype=float)
    if not defined.empty:
        signal_values = ema(defined, signal).to_numpy()
        signal_line.iloc[len(close) - len(signal_values) :] = signal_values

    return pd.DataFrame(
        {
            "macd": macd_line,
            "signal": signal_line,
            "histogram": macd_line - signal_line,
        },
        index=close.index,
    )
