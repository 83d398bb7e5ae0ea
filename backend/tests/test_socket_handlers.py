import threading

import pytest
import socketio

from roomboard.core.db import SessionLocal
from roomboard.realtime.emitter import FanOutEmitter
from roomboard.realtime.events import NewComment, PostDeleted
from roomboard.realtime.registry import ChannelRegistry
from roomboard.realtime.socket import SessionHandlers, SocketIOTransport
from roomboard.services.store import Store

from conftest import comment_record


class FakeServer:
    """Stands in for socketio.AsyncServer: records handlers, rooms and emits."""

    def __init__(self):
        self.handlers = {}
        self.emitted = []
        self.rooms = {}

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def enter_room(self, sid, room, namespace=None):
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid, room, namespace=None):
        self.rooms.get(room, set()).discard(sid)

    async def emit(self, event, data=None, to=None, room=None):
        self.emitted.append((event, data, to or room))


@pytest.fixture
def registry(transport):
    registry = ChannelRegistry(transport)
    registry.init()
    return registry


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def handlers(server, registry):
    handlers = SessionHandlers(server, registry, FanOutEmitter(registry), SessionLocal)
    handlers.register()
    return handlers


def test_register_attaches_every_event(server, handlers):
    assert set(server.handlers) == {
        "connect",
        "disconnect",
        "join-post",
        "leave-post",
        "join-chat",
        "leave-chat",
        "join-presence",
        "leave-presence",
        "user-online",
    }


async def test_signed_in_connect_joins_posts_and_user_channel(server, handlers, registry, users):
    alice = users[0]

    await handlers.connect("s1", {}, {"userId": alice.id})

    assert registry.channels_of("s1") == {"posts", f"user-{alice.id}"}
    assert handlers.user_of("s1") == alice.id
    assert server.emitted[0][0] == "connected"
    assert server.emitted[0][2] == "s1"


async def test_anonymous_connect_joins_posts_only(handlers, registry):
    await handlers.connect("s1", {})

    assert registry.channels_of("s1") == {"posts"}
    assert handlers.user_of("s1") is None


async def test_unknown_user_is_refused(handlers, registry):
    with pytest.raises(socketio.exceptions.ConnectionRefusedError):
        await handlers.connect("s1", {}, {"userId": 999})

    assert registry.channels_of("s1") == frozenset()


async def test_join_and_leave_post(handlers, registry):
    await handlers.connect("s1", {})

    assert await handlers.join_post("s1", "42") is True
    assert "post-42" in registry.channels_of("s1")
    assert await handlers.leave_post("s1", 42) is True
    assert "post-42" not in registry.channels_of("s1")


async def test_invalid_ids_are_refused(handlers, registry):
    await handlers.connect("s1", {})

    assert await handlers.join_post("s1", "abc") is False
    assert await handlers.join_post("s1", True) is False
    assert await handlers.join_presence("s1", -3) is False
    assert registry.channels_of("s1") == {"posts"}


async def test_join_chat_requires_participant(handlers, registry, store, users):
    alice, bob, carol = users
    chat = store.open_chat(alice.id, bob.id)
    await handlers.connect("s-alice", {}, {"userId": alice.id})
    await handlers.connect("s-carol", {}, {"userId": carol.id})
    await handlers.connect("s-anon", {})

    assert await handlers.join_chat("s-alice", chat.id) is True
    assert await handlers.join_chat("s-carol", chat.id) is False
    assert await handlers.join_chat("s-anon", chat.id) is False
    assert registry.members(str(chat.id)) == {"s-alice"}


async def test_disconnect_leaves_every_channel(handlers, registry, users):
    alice = users[0]
    await handlers.connect("s1", {}, {"userId": alice.id})
    await handlers.join_post("s1", 5)

    await handlers.disconnect("s1")

    assert registry.channels_of("s1") == frozenset()
    assert registry.channel_count() == 0
    assert handlers.user_of("s1") is None


async def test_presence_follows_last_session(handlers, registry, transport, users):
    alice, bob, _ = users
    await handlers.connect("watcher", {}, {"userId": bob.id})
    await handlers.join_presence("watcher", alice.id)
    await handlers.connect("a1", {}, {"userId": alice.id})
    await handlers.connect("a2", {}, {"userId": alice.id})

    assert await handlers.user_online("a1") is True
    assert await handlers.user_online("a2") is True
    await handlers.disconnect("a1")

    statuses = [data["online"] for kind, data in transport.received("watcher") if kind == "user-status-change"]
    assert statuses == [True, True]

    await handlers.disconnect("a2")

    statuses = [data["online"] for kind, data in transport.received("watcher") if kind == "user-status-change"]
    assert statuses == [True, True, False]


async def test_user_online_signs_in_anonymous_session(handlers, registry, users):
    alice = users[0]
    await handlers.connect("s1", {})

    assert await handlers.user_online("s1", alice.id) is True
    assert handlers.user_of("s1") == alice.id
    assert f"user-{alice.id}" in registry.channels_of("s1")

    await handlers.connect("s2", {})
    assert await handlers.user_online("s2") is False


@pytest.fixture
def room_registry(server):
    """Registry delivering through Socket.IO rooms on the fake server."""
    registry = ChannelRegistry(SocketIOTransport(server))
    registry.init()
    return registry


async def test_join_and_leave_map_onto_rooms(server, room_registry):
    await room_registry.join("s1", "post-7")
    await room_registry.join("s2", "post-7")
    await room_registry.leave("s1", "post-7")

    assert server.rooms == {"post-7": {"s2"}}


async def test_publish_is_a_single_room_emit(server, room_registry):
    await room_registry.join("s1", "post-7")
    await room_registry.join("s2", "post-7")

    await room_registry.publish("post-7", NewComment(payload=comment_record(7, post_id=7)))

    assert len(server.emitted) == 1
    kind, data, target = server.emitted[0]
    assert (kind, target) == ("new-comment", "post-7")
    assert data["id"] == 7


async def test_publish_reaches_room_without_local_members(server, room_registry):
    await room_registry.publish("posts", PostDeleted(payload=42))

    assert server.emitted == [("post-deleted", 42, "posts")]


async def test_disconnect_leaves_rooms(server, room_registry):
    handlers = SessionHandlers(server, room_registry, FanOutEmitter(room_registry), SessionLocal)
    await handlers.connect("s1", {})
    await handlers.join_post("s1", 3)
    assert server.rooms == {"posts": {"s1"}, "post-3": {"s1"}}

    await handlers.disconnect("s1")

    assert all(not members for members in server.rooms.values())


async def test_user_lookup_runs_off_the_event_loop(handlers, users, monkeypatch):
    loop_thread = threading.get_ident()
    threads = []
    get_user = Store.get_user

    def recording_get_user(self, user_id):
        threads.append(threading.get_ident())
        return get_user(self, user_id)

    monkeypatch.setattr(Store, "get_user", recording_get_user)
    await handlers.connect("s1", {}, {"userId": users[0].id})

    assert threads
    assert loop_thread not in threads
