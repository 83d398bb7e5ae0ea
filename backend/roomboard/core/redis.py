"""
Redis integration for the Socket.IO server.

When REDIS_URL is configured, Socket.IO uses a Redis-backed client manager
so that an emit to a room issued by one worker process reaches the members
of that room connected to any other worker.
"""

import logging
from typing import Optional

import socketio

from roomboard.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def get_client_manager(settings: Optional[Settings] = None) -> Optional[socketio.AsyncRedisManager]:
    """
    Build the Socket.IO client manager for the configured Redis URL.

    Args:
        settings: Settings to read REDIS_URL from (defaults to global settings)

    Returns:
        AsyncRedisManager, or None to use the in-process manager
    """
    settings = settings or default_settings

    if not settings.REDIS_URL:
        return None

    logger.info("Using Redis client manager for Socket.IO")
    return socketio.AsyncRedisManager(settings.REDIS_URL)
