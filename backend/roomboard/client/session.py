"""
Client session: one user's view of the board.

Owns the query cache and feeds it from three sources that may deliver the
same logical update more than once: full refetches, the responses to the
session's own mutations, and realtime events. Responses and events go
through the same reconciler merge, so their arrival order does not matter.
"""

import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from roomboard.client.api import ApiClient, ApiError
from roomboard.client.cache import (
    BOOKMARKS,
    POSTS,
    ClientCache,
    OptimisticUpdate,
    bookmark_key,
    comments_key,
    liked_key,
    likes_key,
    messages_key,
)
from roomboard.client.reconciler import Reconciler
from roomboard.realtime.events import (
    BookmarkUpdated,
    CommentDeleted,
    CommentUpdated,
    LikesUpdated,
    NewComment,
    NewMessage,
    NewPost,
    PostDeleted,
    PostUpdated,
    parse_event,
)
from roomboard.schemas.domain import (
    BookmarkState,
    CommentRead,
    CommentRef,
    LikeCount,
    LikeState,
    MessageRead,
    PostCreate,
    PostRead,
    PostUpdate,
)

logger = logging.getLogger(__name__)


class ClientSession:
    """Cache of one signed-in (or anonymous) user, kept live by events."""

    def __init__(self, api: ApiClient, cache: Optional[ClientCache] = None):
        self.api = api
        self.cache = cache if cache is not None else ClientCache()
        self.reconciler = Reconciler(self.cache)

    @property
    def user_id(self) -> Optional[int]:
        return self.api.user_id

    # ------------------------------------------------------------------
    # Realtime events
    # ------------------------------------------------------------------

    def handle_event(self, kind: str, payload: Any) -> bool:
        """
        Merge one realtime message into the cache.

        Malformed or unknown messages are logged and ignored.
        """
        try:
            event = parse_event(kind, payload)
        except ValidationError as e:
            logger.warning("Ignoring malformed %s event: %s", kind, e)
            return False
        return self.reconciler.apply(event)

    # ------------------------------------------------------------------
    # Refetches (full replace)
    # ------------------------------------------------------------------

    async def refresh_posts(self) -> List[PostRead]:
        posts = await self.api.list_posts()
        self.cache.set(POSTS, posts)
        return posts

    async def refresh_bookmarks(self) -> List[PostRead]:
        posts = await self.api.list_bookmarks()
        self.cache.set(BOOKMARKS, posts)
        return posts

    async def refresh_comments(self, post_id: int) -> List[CommentRead]:
        comments = await self.api.list_comments(post_id)
        self.cache.set(comments_key(post_id), comments)
        return comments

    async def refresh_likes(self, post_id: int) -> LikeCount:
        likes = await self.api.get_likes(post_id)
        count = LikeCount(postId=post_id, count=likes.count)
        self.cache.set(likes_key(post_id), count)
        if self.user_id is not None:
            liked = any(like.userId == self.user_id for like in likes.likes)
            self.cache.set(liked_key(post_id), liked)
        return count

    async def refresh_bookmark(self, post_id: int) -> BookmarkState:
        state = await self.api.get_bookmark(post_id)
        self.cache.set(bookmark_key(post_id), state)
        return state

    async def refresh_messages(self, chat_id: int) -> List[MessageRead]:
        messages = await self.api.list_messages(chat_id)
        self.cache.set(messages_key(chat_id), messages)
        return messages

    # ------------------------------------------------------------------
    # Mutations (response merged like the matching event)
    # ------------------------------------------------------------------

    async def create_post(self, data: PostCreate) -> PostRead:
        post = await self.api.create_post(data)
        self.reconciler.apply(NewPost(payload=post))
        return post

    async def update_post(self, post_id: int, data: PostUpdate) -> PostRead:
        post = await self.api.update_post(post_id, data)
        self.reconciler.apply(PostUpdated(payload=post))
        return post

    async def delete_post(self, post_id: int) -> int:
        deleted_id = await self.api.delete_post(post_id)
        self.reconciler.apply(PostDeleted(payload=deleted_id))
        return deleted_id

    async def create_comment(self, post_id: int, content: str, parent_id: Optional[int] = None) -> CommentRead:
        comment = await self.api.create_comment(post_id, content, parent_id)
        self.reconciler.apply(NewComment(payload=comment))
        return comment

    async def update_comment(self, comment_id: int, content: str) -> CommentRead:
        comment = await self.api.update_comment(comment_id, content)
        self.reconciler.apply(CommentUpdated(payload=comment))
        return comment

    async def delete_comment(self, post_id: int, comment_id: int) -> int:
        deleted_id = await self.api.delete_comment(comment_id)
        self.reconciler.apply(CommentDeleted(payload=CommentRef(id=deleted_id, postId=post_id)))
        return deleted_id

    async def send_message(self, chat_id: int, content: str) -> MessageRead:
        message = await self.api.send_message(chat_id, content)
        self.reconciler.apply(NewMessage(payload=message))
        return message

    # ------------------------------------------------------------------
    # Optimistic toggles
    # ------------------------------------------------------------------

    async def toggle_bookmark(self, post_id: int) -> BookmarkState:
        """
        Flip the bookmark locally, then confirm with the server.

        Raises:
            ApiError: the server rejected the toggle; the local flip is undone
        """
        current = self.cache.get(bookmark_key(post_id))
        bookmarked = bool(current.bookmarked) if current is not None else False
        speculative = BookmarkState(postId=post_id, bookmarked=not bookmarked)

        update = OptimisticUpdate.begin(self.cache, bookmark_key(post_id), speculative)
        try:
            state = await self.api.toggle_bookmark(post_id)
        except ApiError:
            update.rollback()
            raise

        update.commit()
        self.reconciler.apply(BookmarkUpdated(payload=state))
        if state.bookmarked and BOOKMARKS in self.cache:
            post = self._cached_post(post_id)
            if post is not None:
                self.cache.merge_create(BOOKMARKS, post)
        return state

    async def toggle_like(self, post_id: int) -> LikeState:
        """
        Flip the caller's like locally, then confirm with the server.

        Raises:
            ApiError: the server rejected the toggle; the local flip is undone
        """
        liked = bool(self.cache.get(liked_key(post_id), False))

        update = OptimisticUpdate.begin(self.cache, liked_key(post_id), not liked)
        try:
            state = await self.api.toggle_like(post_id)
        except ApiError:
            update.rollback()
            raise

        update.commit(state.liked)
        self.reconciler.apply(LikesUpdated(payload=LikeCount(postId=post_id, count=state.count)))
        return state

    def _cached_post(self, post_id: int) -> Optional[PostRead]:
        for post in self.cache.collection(POSTS):
            if post.id == post_id:
                return post
        return None
