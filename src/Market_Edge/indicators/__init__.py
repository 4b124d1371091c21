"""Technical indicators for the Stacked Edge consensus.

Pure math module: pandas Series/DataFrames in, pandas Series/DataFrames out.
No API calls, no Pydantic models, no I/O.
"""

from Market_Edge.indicators.moving_averages import ema, sma, vwap
from Market_Edge.indicators.oscillators import macd, rsi
from Market_Edge.indicators.trend import adx, true_range
from Market_Edge.indicators.volatility import bollinger_bands

__all__ = [
    "adx",
    "bollinger_bands",
    "ema",
    "macd",
    "rsi",
    "sma",
    "true_range",
    "vwap",
]
