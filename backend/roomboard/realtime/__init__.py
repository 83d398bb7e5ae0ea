"""
Realtime Socket.IO module for the Roomboard backend.

Provides realtime fan-out of committed mutations for:
- Posts (new, updated, deleted)
- Comments and like counts per post
- Private bookmark state
- Chat messages
- User presence
"""

from .registry import ChannelRegistry, Transport
from .emitter import FanOutEmitter
from .events import Event, parse_event
from .socket import SessionHandlers, SocketIOTransport, create_socket_server

__all__ = [
    "ChannelRegistry",
    "Transport",
    "FanOutEmitter",
    "Event",
    "parse_event",
    "SessionHandlers",
    "SocketIOTransport",
    "create_socket_server",
]
