"""WebSocket message schemas for the market streaming endpoint."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from Market_Edge.models.enums import AssetClass


class ClientMessage(BaseModel):
    """Inbound control message: ``{action, symbol, assetClass}``.

    ``action`` is kept as a free string and ``symbol`` may be omitted, so
    unknown actions such as ``{"action": "ping"}`` parse and can be ignored
    instead of being treated as malformed input.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    action: str
    symbol: str = ""
    asset_class: AssetClass = AssetClass.STOCK


class QuoteMessage(BaseModel):
    """Outbound quote push: ``{type: "quote", data: Quote}``.

    ``data`` is either a serialized ``Quote`` or the payload published on the
    bus, forwarded verbatim.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["quote"] = "quote"
    data: dict[str, Any]
