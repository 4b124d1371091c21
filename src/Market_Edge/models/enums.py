"""StrEnum types for the market data domain.

All enums use Python 3.13+ StrEnum. ``AssetClass`` values are lowercase
strings; the direction and phase values are the display labels clients
receive on the wire. Use enum members in business logic, never raw strings.
"""

from enum import StrEnum


class AssetClass(StrEnum):
    """Broad instrument category used for vendor symbol/endpoint routing."""

    STOCK = "stock"
    FOREX = "forex"
    CRYPTO = "crypto"
    INDEX = "index"
    COMMODITY = "commodity"


class SignalDirection(StrEnum):
    """Directional vote of a single indicator, or the consensus net bias."""

    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class MarketPhase(StrEnum):
    """How mature the current net-bias signal appears to be."""

    LEAD_IN = "Lead-In"
    CONFIRMATION = "Confirmation"
    EXHAUSTION = "Exhaustion"
    NEUTRAL = "Neutral"
