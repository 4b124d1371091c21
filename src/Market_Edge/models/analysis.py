"""Consensus models: per-indicator votes and the Stacked Edge result."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from Market_Edge.models.enums import MarketPhase, SignalDirection

# Number of indicators evaluated by the consensus scorer
MAX_SCORE: int = 7


class IndicatorVote(BaseModel):
    """One indicator's vote at the latest bar, with display metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    side: SignalDirection
    value: str
    description: str


class ConsensusResult(BaseModel):
    """Stacked Edge consensus across the seven technical indicators.

    Recomputed on demand from a bar series; never persisted.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    bullish_score: int = 0
    bearish_score: int = 0
    max_score: int = MAX_SCORE
    net_bias: SignalDirection = SignalDirection.NEUTRAL
    phase: MarketPhase = MarketPhase.NEUTRAL
    indicators: list[IndicatorVote] = Field(default_factory=list)
