"""
Realtime event types.

Each event kind is its own pydantic model with a literal ``kind`` tag and a
typed payload; ``Event`` is the closed union of all of them. On the wire an
event travels as a Socket.IO message named after its kind, carrying the
JSON form of its payload.
"""

from typing import Annotated, Any, Literal, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter

from roomboard.schemas.domain import (
    BookmarkState,
    CommentRead,
    CommentRef,
    LikeCount,
    MessageRead,
    PostRead,
    UserStatus,
)
from roomboard.schemas.enums import EventKind


class BaseEvent(BaseModel):
    """Common behaviour of all event variants."""

    kind: str
    payload: Any

    def wire(self) -> Tuple[str, Any]:
        """Socket.IO event name and JSON-ready payload."""
        return self.kind, self.model_dump(mode="json")["payload"]


class NewPost(BaseEvent):
    kind: Literal["new-post"] = EventKind.NEW_POST.value
    payload: PostRead


class PostUpdated(BaseEvent):
    kind: Literal["post-updated"] = EventKind.POST_UPDATED.value
    payload: PostRead


class PostDeleted(BaseEvent):
    """Payload is the deleted post's id."""
    kind: Literal["post-deleted"] = EventKind.POST_DELETED.value
    payload: int


class NewComment(BaseEvent):
    kind: Literal["new-comment"] = EventKind.NEW_COMMENT.value
    payload: CommentRead


class CommentUpdated(BaseEvent):
    kind: Literal["comment-updated"] = EventKind.COMMENT_UPDATED.value
    payload: CommentRead


class CommentDeleted(BaseEvent):
    kind: Literal["comment-deleted"] = EventKind.COMMENT_DELETED.value
    payload: CommentRef


class LikesUpdated(BaseEvent):
    kind: Literal["likes-updated"] = EventKind.LIKES_UPDATED.value
    payload: LikeCount


class BookmarkUpdated(BaseEvent):
    kind: Literal["bookmark-updated"] = EventKind.BOOKMARK_UPDATED.value
    payload: BookmarkState


class NewMessage(BaseEvent):
    kind: Literal["new-message"] = EventKind.NEW_MESSAGE.value
    payload: MessageRead


class UserStatusChange(BaseEvent):
    kind: Literal["user-status-change"] = EventKind.USER_STATUS_CHANGE.value
    payload: UserStatus


Event = Annotated[
    Union[
        NewPost,
        PostUpdated,
        PostDeleted,
        NewComment,
        CommentUpdated,
        CommentDeleted,
        LikesUpdated,
        BookmarkUpdated,
        NewMessage,
        UserStatusChange,
    ],
    Field(discriminator="kind"),
]

_event_adapter = TypeAdapter(Event)


def parse_event(kind: str, payload: Any) -> Event:
    """
    Rebuild a typed event from a wire message.

    Raises:
        pydantic.ValidationError: unknown kind or malformed payload
    """
    return _event_adapter.validate_python({"kind": kind, "payload": payload})
