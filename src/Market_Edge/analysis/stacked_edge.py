"""Stacked Edge consensus: seven indicator votes reduced to one bias and phase.

Each indicator votes BULLISH, BEARISH, or NEUTRAL at the latest bar. The
vote counts give the net bias (majority, NEUTRAL on a tie) and a phase label
describing how mature that bias looks.
"""

import logging
import math

import pandas as pd

from Market_Edge.indicators import adx, bollinger_bands, ema, macd, rsi, sma, vwap
from Market_Edge.models.analysis import MAX_SCORE, ConsensusResult, IndicatorVote
from Market_Edge.models.enums import MarketPhase, SignalDirection
from Market_Edge.models.market_data import Bar

logger = logging.getLogger(__name__)

# --- Minimum history (SMA 200 needs a full window) ---
MIN_BARS: int = 200

# --- Indicator periods ---
LONG_TREND_PERIOD: int = 200
SHORT_TREND_PERIOD: int = 20
RSI_PERIOD: int = 14
BOLLINGER_PERIOD: int = 20
BOLLINGER_STD: float = 2.0
ADX_PERIOD: int = 14

# --- Thresholds ---
RSI_BULLISH_LEVEL: int = 60
RSI_BEARISH_LEVEL: int = 40
RSI_OVERBOUGHT: float = 70.0
RSI_OVERSOLD: float = 30.0
ADX_STRONG_TREND: float = 25.0

# --- Phase thresholds ---
LEAD_IN_MIN_SCORE: int = 1
MATURE_MIN_SCORE: int = 4

_UNDEFINED_DISPLAY: str = "N/A"


def bars_to_frame(bars: list[Bar]) -> pd.DataFrame:
    """Convert an oldest-first bar series into an OHLCV DataFrame."""
    return pd.DataFrame(
        {
            "open": [bar.open for bar in bars],
            "high": [bar.high for bar in bars],
            "low": [bar.low for bar in bars],
            "close": [bar.close for bar in bars],
            "volume": [bar.volume for bar in bars],
        },
        dtype=float,
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _display(value: float) -> str:
    if math.isnan(value):
        return _UNDEFINED_DISPLAY
    return f"{value:.2f}"


def _side(bullish: bool, bearish: bool) -> SignalDirection:
    if bullish:
        return SignalDirection.BULLISH
    if bearish:
        return SignalDirection.BEARISH
    return SignalDirection.NEUTRAL


def calculate_stacked_edge(bars: list[Bar]) -> ConsensusResult:
    """Score a bar series with the seven-indicator Stacked Edge consensus.

    Votes, evaluated at the latest bar:
        1. Long-Trend: close vs SMA(200).
        2. Short-Trend: close vs EMA(20).
        3. Momentum: RSI(14) rounded to exactly 60 (bullish) or 40 (bearish).
        4. Mean Reversion: close crossing the Bollinger middle band.
        5. Volume: close vs cumulative VWAP.
        6. Trend Strength: ADX(14) > 25 with close rising / falling.
        7. Reversal: MACD line crossing its signal line.

    Phase rules are applied in order and the last match wins, so Exhaustion
    outranks Confirmation, which outranks Lead-In.

    Args:
        bars: Bar series ordered oldest first.

    Returns:
        ConsensusResult. With fewer than MIN_BARS bars the result is an empty
        NEUTRAL/NEUTRAL score regardless of content.
    """
    if len(bars) < MIN_BARS:
        logger.debug(
            "Stacked Edge needs %d bars, got %d; returning NEUTRAL",
            MIN_BARS,
            len(bars),
        )
        return ConsensusResult()

    frame = bars_to_frame(bars)
    close = frame["close"]
    last = len(frame) - 1
    price = float(close.iloc[last])
    prev_price = float(close.iloc[last - 1])

    # 1. Long-Trend
    cur_sma = float(sma(close, LONG_TREND_PERIOD).iloc[last])

    # 2. Short-Trend
    cur_ema = float(ema(close, SHORT_TREND_PERIOD).iloc[last])
    bull_short = price > cur_ema
    bear_short = price < cur_ema

    # 3. Momentum: exact match after rounding, not a threshold band
    rsi_values = rsi(close, RSI_PERIOD)
    cur_rsi = float(rsi_values.iloc[last])
    rounded_rsi = None if math.isnan(cur_rsi) else _round_half_up(cur_rsi)

    # 4. Mean Reversion
    middle = bollinger_bands(close, BOLLINGER_PERIOD, BOLLINGER_STD)["middle"]
    cur_mid = float(middle.iloc[last])
    prev_mid = float(middle.iloc[last - 1])
    crossed_above_mid = price > cur_mid and prev_price <= prev_mid
    crossed_below_mid = price < cur_mid and prev_price >= prev_mid

    # 5. Volume
    cur_vwap = float(vwap(frame["high"], frame["low"], close, frame["volume"]).iloc[last])
    bull_vwap = price > cur_vwap
    bear_vwap = price < cur_vwap

    # 6. Trend Strength
    adx_values = adx(frame["high"], frame["low"], close, ADX_PERIOD)
    cur_adx = float(adx_values.iloc[last])
    prev_adx = float(adx_values.iloc[last - 1])
    strong_trend = cur_adx > ADX_STRONG_TREND

    # 7. Reversal
    macd_frame = macd(close)
    cur_macd = float(macd_frame["macd"].iloc[last])
    cur_signal = float(macd_frame["signal"].iloc[last])
    prev_macd = float(macd_frame["macd"].iloc[last - 1])
    prev_signal = float(macd_frame["signal"].iloc[last - 1])
    bull_macd_cross = cur_macd > cur_signal and prev_macd <= prev_signal
    bear_macd_cross = cur_macd < cur_signal and prev_macd >= prev_signal

    indicators = [
        IndicatorVote(
            name="200-Day SMA",
            category="Long-Trend",
            side=_side(price > cur_sma, price < cur_sma),
            value=_display(cur_sma),
            description="Grand Regime indicator.",
        ),
        IndicatorVote(
            name="20-Day EMA",
            category="Short-Trend",
            side=_side(bull_short, bear_short),
            value=_display(cur_ema),
            description="Immediate price gravity.",
        ),
        IndicatorVote(
            name="RSI (14)",
            category="Momentum",
            side=_side(rounded_rsi == RSI_BULLISH_LEVEL, rounded_rsi == RSI_BEARISH_LEVEL),
            value=_display(cur_rsi),
            description="Momentum consensus.",
        ),
        IndicatorVote(
            name="Bollinger Bands",
            category="Mean Reversion",
            side=_side(crossed_above_mid, crossed_below_mid),
            value="Middle Cross",
            description="Trend continuation.",
        ),
        IndicatorVote(
            name="VWAP",
            category="Volume",
            side=_side(bull_vwap, bear_vwap),
            value=_display(cur_vwap),
            description="Big Money price.",
        ),
        IndicatorVote(
            name="ADX (14)",
            category="Trend Strength",
            side=_side(strong_trend and price > prev_price, strong_trend and price < prev_price),
            value=_display(cur_adx),
            description="Trend power.",
        ),
        IndicatorVote(
            name="MACD",
            category="Reversal",
            side=_side(bull_macd_cross, bear_macd_cross),
            value="Crossover",
            description="Momentum shift.",
        ),
    ]

    bullish_score = sum(1 for vote in indicators if vote.side is SignalDirection.BULLISH)
    bearish_score = sum(1 for vote in indicators if vote.side is SignalDirection.BEARISH)

    net_bias = SignalDirection.NEUTRAL
    if bullish_score > bearish_score:
        net_bias = SignalDirection.BULLISH
    elif bearish_score > bullish_score:
        net_bias = SignalDirection.BEARISH

    # On a tie both scores are equal, so either serves as the active score
    active_score = bullish_score if net_bias is SignalDirection.BULLISH else bearish_score

    phase = MarketPhase.NEUTRAL
    if active_score >= LEAD_IN_MIN_SCORE:
        if bull_macd_cross or bear_macd_cross or RSI_BEARISH_LEVEL < cur_rsi < RSI_BULLISH_LEVEL:
            phase = MarketPhase.LEAD_IN
        if active_score >= MATURE_MIN_SCORE and (
            (net_bias is SignalDirection.BULLISH and bull_short and bull_vwap)
            or (net_bias is SignalDirection.BEARISH and bear_short and bear_vwap)
        ):
            phase = MarketPhase.CONFIRMATION
        if active_score >= MATURE_MIN_SCORE and (
            cur_rsi > RSI_OVERBOUGHT or cur_rsi < RSI_OVERSOLD or cur_adx < prev_adx
        ):
            phase = MarketPhase.EXHAUSTION

    logger.debug(
        "Stacked Edge: bullish=%d, bearish=%d, bias=%s, phase=%s (RSI=%.2f, ADX=%.2f)",
        bullish_score,
        bearish_score,
        net_bias,
        phase,
        cur_rsi,
        cur_adx,
    )

    return ConsensusResult(
        bullish_score=bullish_score,
        bearish_score=bearish_score,
        max_score=MAX_SCORE,
        net_bias=net_bias,
        phase=phase,
        indicators=indicators,
    )
