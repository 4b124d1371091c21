"""Shared helpers for the vendor adapter modules.

Consolidates the lenient numeric and timestamp conversions every vendor
payload needs: JSON fields arrive as numbers, numeric strings, or missing.
"""

from __future__ import annotations

import datetime
import math
import time
from typing import Final

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

SECONDS_PER_DAY: Final[int] = 86_400

# Interval label -> bar length in seconds. Both the "1d" style labels and the
# chart-style labels ("D", "240") are accepted.
INTERVAL_SECONDS: Final[dict[str, int]] = {
    "5m": 300,
    "15m": 900,
    "30m": 1_800,
    "1h": 3_600,
    "4h": 14_400,
    "1d": SECONDS_PER_DAY,
    "1w": 604_800,
    "1mo": 2_592_000,
    "5": 300,
    "15": 900,
    "30": 1_800,
    "60": 3_600,
    "240": 14_400,
    "D": SECONDS_PER_DAY,
    "W": 604_800,
    "M": 2_592_000,
}


def interval_seconds(interval: str) -> int:
    """Bar length for *interval*, defaulting to one day."""
    return INTERVAL_SECONDS.get(interval, SECONDS_PER_DAY)


# ---------------------------------------------------------------------------
# Safe type conversions
# ---------------------------------------------------------------------------


def safe_float(value: object) -> float:
    """Convert a numeric value to float, treating NaN/None/garbage as 0.0."""
    if value is None:
        return 0.0
    try:
        float_val = float(str(value))
        if math.isnan(float_val) or math.isinf(float_val):
            return 0.0
        return float_val
    except (ValueError, TypeError):
        return 0.0


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def epoch_seconds_to_ms(value: object) -> int:
    """Vendor epoch seconds to epoch ms, using now when the field is absent."""
    seconds = safe_float(value)
    if seconds <= 0:
        return now_ms()
    return int(seconds * 1000)


def date_to_ms(value: str) -> int:
    """Parse a vendor date or datetime string into epoch ms.

    Accepts ``"2024-01-05"`` and ``"2024-01-05 15:30:00"``; naive values
    are read as UTC.
    """
    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.UTC)
    return int(parsed.timestamp() * 1000)
