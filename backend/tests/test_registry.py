import pytest

from roomboard.realtime.events import PostDeleted
from roomboard.realtime.registry import ChannelRegistry


@pytest.fixture
def registry(transport):
    registry = ChannelRegistry(transport)
    registry.init()
    return registry


async def test_publish_reaches_only_channel_members(registry, transport):
    await registry.join("a", "posts")
    await registry.join("b", "post-1")

    assert await registry.publish("posts", PostDeleted(payload=3)) is True

    assert transport.sent == [("a", "post-deleted", 3)]


async def test_publish_is_one_broadcast_per_event(registry, transport):
    for sid in ("a", "b", "c"):
        await registry.join(sid, "post-1")

    await registry.publish("post-1", PostDeleted(payload=1))

    assert transport.broadcasts == [("post-1", "post-deleted", 1)]
    assert len(transport.sent) == 3


async def test_late_joiner_misses_earlier_events(registry, transport):
    await registry.join("a", "post-1")
    await registry.publish("post-1", PostDeleted(payload=1))

    await registry.join("b", "post-1")
    await registry.publish("post-1", PostDeleted(payload=2))

    assert transport.received("a") == [("post-deleted", 1), ("post-deleted", 2)]
    assert transport.received("b") == [("post-deleted", 2)]


async def test_joining_twice_delivers_once(registry, transport):
    assert await registry.join("a", "posts") is True
    assert await registry.join("a", "posts") is False

    await registry.publish("posts", PostDeleted(payload=1))
    assert len(transport.sent) == 1


async def test_leave_stops_delivery(registry, transport):
    await registry.join("a", "post-1")
    assert await registry.leave("a", "post-1") is True

    await registry.publish("post-1", PostDeleted(payload=1))
    assert transport.sent == []
    assert transport.rooms == {}
    assert registry.channel_count() == 0


async def test_leave_without_join_is_noop(registry, transport):
    await registry.join("a", "posts")

    assert await registry.leave("a", "post-9") is False
    assert await registry.leave("b", "posts") is False
    assert registry.members("posts") == {"a"}
    assert list(transport.rooms["posts"]) == ["a"]


async def test_join_leave_restores_membership(registry):
    await registry.join("a", "posts")
    before = registry.channels_of("a")

    await registry.join("a", "post-1")
    await registry.leave("a", "post-1")

    assert registry.channels_of("a") == before


async def test_leave_all_on_disconnect(registry, transport):
    for channel in ("posts", "user-1", "post-3"):
        await registry.join("a", channel)
    await registry.join("b", "posts")

    assert await registry.leave_all("a") == ["post-3", "posts", "user-1"]
    assert registry.channels_of("a") == frozenset()
    assert registry.members("posts") == {"b"}
    assert registry.channel_count() == 1
    assert set(transport.rooms) == {"posts"}


async def test_unreachable_session_does_not_block_others(registry, transport):
    transport.failing.add("a")
    await registry.join("a", "posts")
    await registry.join("b", "posts")

    await registry.publish("posts", PostDeleted(payload=5))

    assert transport.sent == [("b", "post-deleted", 5)]


async def test_publish_without_local_members_still_broadcasts(registry, transport):
    # Members may be connected to another worker
    assert await registry.publish("post-404", PostDeleted(payload=404)) is True

    assert transport.broadcasts == [("post-404", "post-deleted", 404)]
    assert transport.sent == []


async def test_publish_before_init_is_dropped(transport):
    registry = ChannelRegistry(transport)
    await registry.join("a", "posts")

    assert registry.started is False
    assert await registry.publish("posts", PostDeleted(payload=1)) is False
    assert transport.broadcasts == []


async def test_teardown_empties_rooms(registry, transport):
    await registry.join("a", "posts")
    await registry.join("a", "post-1")
    await registry.teardown()

    assert registry.started is False
    assert registry.channel_count() == 0
    assert transport.rooms == {}

    registry.init()
    await registry.publish("posts", PostDeleted(payload=1))
    assert transport.sent == []
