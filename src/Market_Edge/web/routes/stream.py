"""Market WebSocket route.

WS /ws/market: subscribe/unsubscribe to live quotes per symbol.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket

from Market_Edge.streaming.gateway import StreamingGateway
from Market_Edge.web.deps import get_gateway

router = APIRouter(tags=["stream"])


@router.websocket("/ws/market")
async def market_stream(
    websocket: WebSocket,
    gateway: Annotated[StreamingGateway, Depends(get_gateway)],
) -> None:
    """Hand the connection to the app-wide gateway for its lifetime."""
    await gateway.serve(websocket)
