"""
Fan-out emitter: turns committed store mutations into channel publishes.

Endpoints call one method per successful mutation, after the store has
committed. Each method makes exactly one publish to the channel scoped to
the affected entity. A failing publish is logged and swallowed: the write
already happened and the caller still gets its response; sessions that
missed the event catch up on their next refetch.
"""

import logging

from roomboard.realtime.channels import (
    CHANNEL_POSTS,
    chat_channel,
    post_channel,
    presence_channel,
    user_channel,
)
from roomboard.realtime.events import (
    BookmarkUpdated,
    CommentDeleted,
    CommentUpdated,
    Event,
    LikesUpdated,
    NewComment,
    NewMessage,
    NewPost,
    PostDeleted,
    PostUpdated,
    UserStatusChange,
)
from roomboard.realtime.registry import ChannelRegistry
from roomboard.schemas.domain import (
    BookmarkState,
    CommentRead,
    CommentRef,
    LikeCount,
    LikeState,
    MessageRead,
    PostRead,
    UserStatus,
)

logger = logging.getLogger(__name__)


class FanOutEmitter:
    """Binds mutations to the channel they must be published on."""

    def __init__(self, registry: ChannelRegistry):
        self._registry = registry

    async def _publish(self, channel: str, event: Event) -> None:
        try:
            await self._registry.publish(channel, event)
        except Exception:
            logger.warning("Failed to publish %s to %s", event.kind, channel, exc_info=True)

    # Posts go to every connected session

    async def post_created(self, post: PostRead) -> None:
        await self._publish(CHANNEL_POSTS, NewPost(payload=post))

    async def post_updated(self, post: PostRead) -> None:
        await self._publish(CHANNEL_POSTS, PostUpdated(payload=post))

    async def post_deleted(self, post_id: int) -> None:
        await self._publish(CHANNEL_POSTS, PostDeleted(payload=post_id))

    # Comments and likes go to the sessions viewing the post

    async def comment_created(self, comment: CommentRead) -> None:
        await self._publish(post_channel(comment.postId), NewComment(payload=comment))

    async def comment_updated(self, comment: CommentRead) -> None:
        await self._publish(post_channel(comment.postId), CommentUpdated(payload=comment))

    async def comment_deleted(self, ref: CommentRef) -> None:
        await self._publish(post_channel(ref.postId), CommentDeleted(payload=ref))

    async def likes_updated(self, state: LikeState) -> None:
        # Whether the post is liked depends on the viewer; only the count is shared
        count = LikeCount(postId=state.postId, count=state.count)
        await self._publish(post_channel(state.postId), LikesUpdated(payload=count))

    # Bookmarks are private to the user's own sessions

    async def bookmark_updated(self, user_id: int, state: BookmarkState) -> None:
        await self._publish(user_channel(user_id), BookmarkUpdated(payload=state))

    async def message_created(self, message: MessageRead) -> None:
        await self._publish(chat_channel(message.chatId), NewMessage(payload=message))

    async def user_status_changed(self, status: UserStatus) -> None:
        await self._publish(presence_channel(status.userId), UserStatusChange(payload=status))
