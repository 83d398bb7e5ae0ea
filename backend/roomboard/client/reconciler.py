"""
Merges realtime events into a session's ClientCache.

Merge rules:
- create events append unless the id is already cached
- update events replace a cached record and ignore unknown ones
- delete events remove a cached record if present
- status/aggregate events overwrite their value slot

All of them can be applied twice, or after the matching HTTP response,
without changing the result.
"""

import logging
from typing import Set

from roomboard.client.cache import (
    BOOKMARKS,
    POSTS,
    ClientCache,
    bookmark_key,
    comments_key,
    likes_key,
    messages_key,
    status_key,
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

logger = logging.getLogger(__name__)


class Reconciler:
    """Applies events to one cache."""

    def __init__(self, cache: ClientCache):
        self.cache = cache

    def apply(self, event: Event) -> bool:
        """
        Merge one event.

        Returns:
            True if the cache changed
        """
        if isinstance(event, NewPost):
            return self.cache.merge_create(POSTS, event.payload)
        if isinstance(event, PostUpdated):
            return self._post_updated(event)
        if isinstance(event, PostDeleted):
            return self._post_deleted(event)
        if isinstance(event, NewComment):
            return self.cache.merge_create(comments_key(event.payload.postId), event.payload)
        if isinstance(event, CommentUpdated):
            return self.cache.merge_update(comments_key(event.payload.postId), event.payload)
        if isinstance(event, CommentDeleted):
            return self._comment_deleted(event)
        if isinstance(event, LikesUpdated):
            return self._overwrite(likes_key(event.payload.postId), event.payload)
        if isinstance(event, BookmarkUpdated):
            return self._bookmark_updated(event)
        if isinstance(event, NewMessage):
            return self.cache.merge_create(messages_key(event.payload.chatId), event.payload)
        if isinstance(event, UserStatusChange):
            return self._overwrite(status_key(event.payload.userId), event.payload)
        raise TypeError(f"Unhandled event type: {type(event).__name__}")

    def _overwrite(self, key, value) -> bool:
        changed = self.cache.get(key) != value
        self.cache.set(key, value)
        return changed

    def _post_updated(self, event: PostUpdated) -> bool:
        # Evaluate both: a post can be in the feed and among saved posts
        in_feed = self.cache.merge_update(POSTS, event.payload)
        in_saved = self.cache.merge_update(BOOKMARKS, event.payload)
        return in_feed or in_saved

    def _post_deleted(self, event: PostDeleted) -> bool:
        post_id = event.payload
        in_feed = self.cache.merge_delete(POSTS, post_id)
        in_saved = self.cache.merge_delete(BOOKMARKS, post_id)
        dropped = self.cache.discard_prefix(("posts", post_id))
        if dropped:
            logger.debug("Dropped %d cached entries of deleted post %s", len(dropped), post_id)
        return in_feed or in_saved or bool(dropped)

    def _comment_deleted(self, event: CommentDeleted) -> bool:
        """Remove the comment and every cached reply below it."""
        key = comments_key(event.payload.postId)
        comments = self.cache.collection(key)

        doomed: Set[int] = {event.payload.id}
        grew = True
        while grew:
            grew = False
            for comment in comments:
                if comment.parentId in doomed and comment.id not in doomed:
                    doomed.add(comment.id)
                    grew = True

        changed = False
        for comment_id in doomed:
            changed = self.cache.merge_delete(key, comment_id) or changed
        return changed

    def _bookmark_updated(self, event: BookmarkUpdated) -> bool:
        state = event.payload
        changed = self._overwrite(bookmark_key(state.postId), state)
        if not state.bookmarked:
            changed = self.cache.merge_delete(BOOKMARKS, state.postId) or changed
        return changed
