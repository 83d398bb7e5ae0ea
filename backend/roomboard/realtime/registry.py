"""
Channel registry: which connected sessions belong to which channel.

The registry is a service object built once per application, started by
``init()`` when the server starts and cleared by ``teardown()`` on shutdown.
Room membership itself lives in the transport (the Socket.IO room manager,
shared across workers when Redis is configured); the registry mirrors the
memberships of the sessions connected to this process so that a
disconnecting session can leave everything it joined.

Channels exist only while they have members. Delivery is best effort: one
broadcast per publish, nothing is queued or retried, and sessions joining
later never see an earlier event.
"""

import logging
from typing import Any, Dict, FrozenSet, List, Protocol, Set

from roomboard.realtime.events import Event

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Room membership and delivery for connected sessions."""

    async def enter(self, session_id: str, channel: str) -> None:
        ...

    async def exit(self, session_id: str, channel: str) -> None:
        ...

    async def broadcast(self, channel: str, kind: str, data: Any) -> None:
        ...


class ChannelRegistry:
    """Joins sessions to channels and publishes events to channels."""

    def __init__(self, transport: Transport):
        self._transport = transport
        self._members: Dict[str, Set[str]] = {}
        self._sessions: Dict[str, Set[str]] = {}
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def init(self) -> None:
        """Start accepting publishes with empty membership."""
        self._members.clear()
        self._sessions.clear()
        self._started = True
        logger.info("Channel registry started")

    async def teardown(self) -> None:
        """Take every local session out of its rooms and stop delivering."""
        self._started = False
        channels = len(self._members)
        for session_id in list(self._sessions):
            await self.leave_all(session_id)
        logger.info("Channel registry stopped (%d channels dropped)", channels)

    async def join(self, session_id: str, channel: str) -> bool:
        """
        Add a session to a channel. Joining twice is a no-op.

        Returns:
            True if the session was not a member before
        """
        members = self._members.setdefault(channel, set())
        if session_id in members:
            return False

        await self._transport.enter(session_id, channel)
        members.add(session_id)
        self._sessions.setdefault(session_id, set()).add(channel)
        logger.debug("Session %s joined %s", session_id, channel)
        return True

    async def leave(self, session_id: str, channel: str) -> bool:
        """
        Remove a session from a channel. Leaving a channel the session is
        not in is a no-op.

        Returns:
            True if the session was a member
        """
        members = self._members.get(channel)
        if not members or session_id not in members:
            return False

        members.discard(session_id)
        if not members:
            del self._members[channel]

        channels = self._sessions.get(session_id)
        if channels is not None:
            channels.discard(channel)
            if not channels:
                del self._sessions[session_id]

        await self._transport.exit(session_id, channel)
        logger.debug("Session %s left %s", session_id, channel)
        return True

    async def leave_all(self, session_id: str) -> List[str]:
        """Remove a session from every channel (on disconnect)."""
        channels = sorted(self._sessions.get(session_id, ()))
        for channel in channels:
            await self.leave(session_id, channel)
        return channels

    def members(self, channel: str) -> FrozenSet[str]:
        """Members of the channel connected to this process."""
        return frozenset(self._members.get(channel, ()))

    def channels_of(self, session_id: str) -> FrozenSet[str]:
        return frozenset(self._sessions.get(session_id, ()))

    def channel_count(self) -> int:
        return len(self._members)

    async def publish(self, channel: str, event: Event) -> bool:
        """
        Deliver an event to the sessions in the channel right now.

        The channel may have members on other workers, so the broadcast is
        issued even when no local session joined it.

        Returns:
            True if the event was handed to the transport
        """
        if not self._started:
            logger.warning("Registry not started, dropping %s for %s", event.kind, channel)
            return False

        kind, data = event.wire()
        await self._transport.broadcast(channel, kind, data)
        logger.debug("Published %s to %s", kind, channel)
        return True
