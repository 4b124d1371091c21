"""Live quote streaming over WebSocket with ref-counted bus subscriptions.

Re-exports all public classes so consumers can import directly:
    from Market_Edge.streaming import StreamingGateway, InMemoryBus
"""

from Market_Edge.streaming.bus import InMemoryBus, MessageHandler, PubSubBus, RedisPubSubBus
from Market_Edge.streaming.gateway import StreamingGateway
from Market_Edge.streaming.registry import ChannelRegistry
from Market_Edge.streaming.session import ConnectionSession, channel_for

__all__ = [
    # Bus
    "InMemoryBus",
    "MessageHandler",
    "PubSubBus",
    "RedisPubSubBus",
    # Subscriptions
    "ChannelRegistry",
    "ConnectionSession",
    "StreamingGateway",
    "channel_for",
]
