"""Market data models: OHLCV bars and live quote snapshots.

Prices are plain floats because every vendor delivers JSON numbers and the
indicator library works on float Series. Timestamps are epoch milliseconds,
which is what the WebSocket clients chart against.
"""

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

from Market_Edge.models.enums import AssetClass


class Bar(BaseModel):
    """A single time-bucketed OHLCV price bar.

    Frozen because historical price data should never be mutated after creation.
    """

    model_config = ConfigDict(frozen=True)

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


class Quote(BaseModel):
    """Current-price snapshot for one symbol.

    Frozen because a quote is a point-in-time snapshot. ``provider`` names the
    vendor that produced it ("Mock" for synthesized data). Serialized with
    camelCase keys (``changePercent``, ``assetClass``) for clients.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    symbol: str
    price: float
    change: float
    change_percent: float
    high: float
    low: float
    open: float
    previous_close: float
    timestamp: int
    asset_class: AssetClass
    provider: str


# Series are stored and cached as JSON arrays of bars, oldest first.
BarSeries = TypeAdapter(list[Bar])
