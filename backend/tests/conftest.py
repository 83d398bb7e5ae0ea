"""
Shared fixtures: an in-memory database recreated per test, a recording
transport standing in for Socket.IO, and record factories.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"

from typing import Any, Dict, List, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from roomboard.core.db import SessionLocal, engine
from roomboard.main import create_app
from roomboard.models import Base
from roomboard.schemas.domain import (
    CommentRead,
    MessageRead,
    PostCreate,
    PostRead,
    UserCreate,
)
from roomboard.services.store import Store

CREATED_AT = "2026-01-01T10:00:00.000000+00:00"

ROOM = {
    "type": "room",
    "title": "Room near metro",
    "description": "Sunny room in a 2BHK",
    "price": 9000,
    "location": "HSR Layout",
    "images": ["https://images.example.com/room.jpg"],
}

JOB = {
    "type": "job",
    "title": "Weekend barista",
    "description": "Saturdays and Sundays",
    "location": "Indiranagar",
}


class RecordingTransport:
    """
    In-process stand-in for Socket.IO rooms that records every delivery.

    A broadcast reaches the room members at that moment; sessions in
    ``failing`` are unreachable and silently miss it, and ``broken`` makes
    the broadcast itself raise.
    """

    def __init__(self):
        self.rooms: Dict[str, Dict[str, None]] = {}
        self.broadcasts: List[Tuple[str, str, Any]] = []
        self.sent: List[Tuple[str, str, Any]] = []
        self.failing: Set[str] = set()
        self.broken = False

    async def enter(self, session_id: str, channel: str) -> None:
        self.rooms.setdefault(channel, {})[session_id] = None

    async def exit(self, session_id: str, channel: str) -> None:
        room = self.rooms.get(channel, {})
        room.pop(session_id, None)
        if not room:
            self.rooms.pop(channel, None)

    async def broadcast(self, channel: str, kind: str, data: Any) -> None:
        if self.broken:
            raise ConnectionError("transport is down")
        self.broadcasts.append((channel, kind, data))
        for session_id in list(self.rooms.get(channel, ())):
            if session_id not in self.failing:
                self.sent.append((session_id, kind, data))

    def received(self, session_id: str) -> List[Tuple[str, Any]]:
        return [(kind, data) for sid, kind, data in self.sent if sid == session_id]

    def kinds(self) -> List[str]:
        return [kind for _, kind, _ in self.sent]


@pytest.fixture(autouse=True)
def database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return Store(db)


@pytest.fixture
def users(store):
    """Three registered users: alice, bob and carol."""
    return [
        store.create_user(UserCreate(username=name, fullname=name.capitalize()))
        for name in ("alice", "bob", "carol")
    ]


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def app(transport):
    return create_app(transport=transport)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def room_post():
    return PostCreate(**ROOM)


def auth(user) -> dict:
    return {"X-User-Id": str(user.id)}


def post_record(post_id: int = 1, **overrides) -> PostRead:
    data = dict(JOB, id=post_id, userId=1, username="alice", createdAt=CREATED_AT)
    data.update(overrides)
    return PostRead(**data)


def comment_record(comment_id: int, post_id: int = 1, parent_id=None, **overrides) -> CommentRead:
    data = {
        "id": comment_id,
        "postId": post_id,
        "userId": 1,
        "parentId": parent_id,
        "content": f"comment {comment_id}",
        "createdAt": CREATED_AT,
    }
    data.update(overrides)
    return CommentRead(**data)


def message_record(message_id: int, chat_id: int = 1, **overrides) -> MessageRead:
    data = {
        "id": message_id,
        "chatId": chat_id,
        "senderId": 1,
        "content": f"message {message_id}",
        "createdAt": CREATED_AT,
    }
    data.update(overrides)
    return MessageRead(**data)
