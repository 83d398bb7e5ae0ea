"""
Socket.IO client feeding a ClientSession.
"""

import logging
from typing import Any, Optional

import socketio

from roomboard.client.session import ClientSession
from roomboard.schemas.enums import EventKind

logger = logging.getLogger(__name__)


class RealtimeClient:
    """
    Connects one session to the realtime server.

    Every event kind is routed to ``session.handle_event``. Channel
    membership follows what the user is looking at: join a post's channel
    while viewing it, leave it when navigating away.
    """

    def __init__(self, session: ClientSession, sio: Optional[socketio.AsyncClient] = None):
        self.session = session
        self.sio = sio if sio is not None else socketio.AsyncClient()

        self.sio.on("connected", self._on_connected)
        for kind in EventKind:
            self.sio.on(kind.value, self._handler(kind.value))

    def _handler(self, kind: str):
        async def handle(data: Any) -> None:
            self.session.handle_event(kind, data)

        return handle

    async def _on_connected(self, data: Any) -> None:
        logger.info("Realtime connected: %s", data)

    async def connect(self, url: str) -> None:
        auth = {"userId": self.session.user_id} if self.session.user_id is not None else None
        await self.sio.connect(url, auth=auth, transports=["websocket"])

    async def disconnect(self) -> None:
        await self.sio.disconnect()

    async def _call(self, event: str, data: Any) -> bool:
        joined = await self.sio.call(event, data)
        if not joined:
            logger.warning("Server refused %s %s", event, data)
        return bool(joined)

    async def view_post(self, post_id: int) -> bool:
        """Join the post's channel, then load its comments and likes."""
        joined = await self._call("join-post", post_id)
        await self.session.refresh_comments(post_id)
        await self.session.refresh_likes(post_id)
        return joined

    async def leave_post(self, post_id: int) -> bool:
        return await self._call("leave-post", post_id)

    async def open_chat(self, chat_id: int) -> bool:
        """Join the chat's channel, then load its messages."""
        joined = await self._call("join-chat", chat_id)
        await self.session.refresh_messages(chat_id)
        return joined

    async def leave_chat(self, chat_id: int) -> bool:
        return await self._call("leave-chat", chat_id)

    async def watch_presence(self, user_id: int) -> bool:
        return await self._call("join-presence", user_id)

    async def unwatch_presence(self, user_id: int) -> bool:
        return await self._call("leave-presence", user_id)

    async def announce_online(self) -> bool:
        return await self._call("user-online", self.session.user_id)
