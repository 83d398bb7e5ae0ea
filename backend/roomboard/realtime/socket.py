"""
Socket.IO server, transport and session event handlers.

Clients connect with ``auth={"userId": <id>}`` (optional) and then join the
channels of whatever they are looking at:

- ``join-post`` / ``leave-post`` with a post id
- ``join-chat`` / ``leave-chat`` with a chat id (participants only)
- ``join-presence`` / ``leave-presence`` with a user id
- ``user-online`` to announce the signed-in user as online

Every session is in the ``posts`` channel, and signed-in sessions are in
their private ``user-<id>`` channel. Handlers answer join/leave with an ack
of True/False.
"""

import logging
from typing import Any, Callable, Dict, Optional, Set

import socketio
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from roomboard.core.config import Settings
from roomboard.core.errors import NotFoundError
from roomboard.core.redis import get_client_manager
from roomboard.realtime.channels import (
    CHANNEL_POSTS,
    chat_channel,
    post_channel,
    presence_channel,
    user_channel,
)
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.realtime.registry import ChannelRegistry
from roomboard.schemas.domain import UserStatus
from roomboard.services.store import Store

logger = logging.getLogger(__name__)


def create_socket_server(settings: Settings) -> socketio.AsyncServer:
    """Create the Socket.IO server in ASGI mode for FastAPI integration."""
    origins = settings.CORS_ORIGINS
    return socketio.AsyncServer(
        cors_allowed_origins="*" if "*" in origins else origins,
        async_mode="asgi",
        client_manager=get_client_manager(settings),
    )


class SocketIOTransport:
    """
    Registry transport backed by Socket.IO rooms.

    Channels map one-to-one onto rooms, so a single emit to the room reaches
    every member, including sessions held by other workers when the server
    runs on the Redis client manager.
    """

    def __init__(self, sio: socketio.AsyncServer):
        self._sio = sio

    async def enter(self, session_id: str, channel: str) -> None:
        await self._sio.enter_room(session_id, channel)

    async def exit(self, session_id: str, channel: str) -> None:
        await self._sio.leave_room(session_id, channel)

    async def broadcast(self, channel: str, kind: str, data: Any) -> None:
        await self._sio.emit(kind, data, room=channel)


def _parse_id(value: Any) -> Optional[int]:
    """Entity ids arrive as ints or numeric strings."""
    if isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


class SessionHandlers:
    """
    Socket.IO event handlers bound to one registry and emitter.

    Keeps track of which user each session signed in as, and which
    sessions announced their user online. Database work runs in the
    threadpool so the event loop keeps serving other sessions.
    """

    def __init__(
        self,
        sio: socketio.AsyncServer,
        registry: ChannelRegistry,
        emitter: FanOutEmitter,
        session_factory: Callable[[], Session],
    ):
        self._sio = sio
        self._registry = registry
        self._emitter = emitter
        self._session_factory = session_factory
        self._users: Dict[str, int] = {}
        self._online: Set[str] = set()

    def register(self) -> None:
        """Attach the handlers to the Socket.IO server."""
        self._sio.on("connect", self.connect)
        self._sio.on("disconnect", self.disconnect)
        self._sio.on("join-post", self.join_post)
        self._sio.on("leave-post", self.leave_post)
        self._sio.on("join-chat", self.join_chat)
        self._sio.on("leave-chat", self.leave_chat)
        self._sio.on("join-presence", self.join_presence)
        self._sio.on("leave-presence", self.leave_presence)
        self._sio.on("user-online", self.user_online)

    def user_of(self, sid: str) -> Optional[int]:
        return self._users.get(sid)

    def _user_exists(self, user_id: int) -> bool:
        with self._session_factory() as db:
            try:
                Store(db).get_user(user_id)
            except NotFoundError:
                return False
        return True

    def _is_participant(self, user_id: int, chat_id: int) -> bool:
        with self._session_factory() as db:
            return Store(db).is_participant(user_id, chat_id)

    def _store_online(self, user_id: int, online: bool) -> Optional[UserStatus]:
        with self._session_factory() as db:
            try:
                return Store(db).set_user_online(user_id, online)
            except NotFoundError:
                return None

    async def _bind_user(self, sid: str, user_id: int) -> None:
        self._users[sid] = user_id
        await self._registry.join(sid, user_channel(user_id))

    async def connect(self, sid: str, environ: Dict[str, Any], auth: Optional[Dict[str, Any]] = None):
        """Handle client connection."""
        user_id = None
        if isinstance(auth, dict) and auth.get("userId") is not None:
            user_id = _parse_id(auth.get("userId"))
            if user_id is None or not await run_in_threadpool(self._user_exists, user_id):
                logger.info("Refusing connection %s: unknown user %r", sid, auth.get("userId"))
                raise socketio.exceptions.ConnectionRefusedError("Unknown user")

        await self._registry.join(sid, CHANNEL_POSTS)
        if user_id is not None:
            await self._bind_user(sid, user_id)

        logger.info("Client connected: %s (user %s)", sid, user_id)
        await self._sio.emit("connected", {"message": "Connected to Roomboard realtime server"}, to=sid)

    async def disconnect(self, sid: str, reason: Any = None) -> None:
        """Handle client disconnection."""
        channels = await self._registry.leave_all(sid)
        user_id = self._users.pop(sid, None)
        logger.info("Client disconnected: %s (left %d channels)", sid, len(channels))

        if sid not in self._online:
            return
        self._online.discard(sid)

        # Still online through another session
        if user_id is None or any(self._users.get(other) == user_id for other in self._online):
            return
        await self._set_online(user_id, False)

    async def _set_online(self, user_id: int, online: bool) -> bool:
        status = await run_in_threadpool(self._store_online, user_id, online)
        if status is None:
            return False
        await self._emitter.user_status_changed(status)
        return True

    async def join_post(self, sid: str, post_id: Any) -> bool:
        parsed = _parse_id(post_id)
        if parsed is None:
            return False
        await self._registry.join(sid, post_channel(parsed))
        return True

    async def leave_post(self, sid: str, post_id: Any) -> bool:
        parsed = _parse_id(post_id)
        if parsed is None:
            return False
        await self._registry.leave(sid, post_channel(parsed))
        return True

    async def join_chat(self, sid: str, chat_id: Any) -> bool:
        parsed = _parse_id(chat_id)
        user_id = self._users.get(sid)
        if parsed is None or user_id is None:
            return False

        if not await run_in_threadpool(self._is_participant, user_id, parsed):
            logger.info("Session %s (user %s) refused chat %s", sid, user_id, parsed)
            return False

        await self._registry.join(sid, chat_channel(parsed))
        return True

    async def leave_chat(self, sid: str, chat_id: Any) -> bool:
        parsed = _parse_id(chat_id)
        if parsed is None:
            return False
        await self._registry.leave(sid, chat_channel(parsed))
        return True

    async def join_presence(self, sid: str, user_id: Any) -> bool:
        parsed = _parse_id(user_id)
        if parsed is None:
            return False
        await self._registry.join(sid, presence_channel(parsed))
        return True

    async def leave_presence(self, sid: str, user_id: Any) -> bool:
        parsed = _parse_id(user_id)
        if parsed is None:
            return False
        await self._registry.leave(sid, presence_channel(parsed))
        return True

    async def user_online(self, sid: str, user_id: Any = None) -> bool:
        """
        Mark the session's user online. Sessions that connected without
        auth may name their user here, which also signs them in.
        """
        bound = self._users.get(sid)
        if bound is None:
            bound = _parse_id(user_id)
            if bound is None or not await run_in_threadpool(self._user_exists, bound):
                return False
            await self._bind_user(sid, bound)

        self._online.add(sid)
        return await self._set_online(bound, True)
