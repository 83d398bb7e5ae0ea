"""
Enum definitions for Roomboard domain models.
"""

from enum import Enum


class PostType(str, Enum):
    """Listing type enumeration."""

    ROOM = "room"
    JOB = "job"


class EventKind(str, Enum):
    """Realtime event kinds, also used as Socket.IO event names."""

    NEW_POST = "new-post"
    POST_UPDATED = "post-updated"
    POST_DELETED = "post-deleted"
    NEW_COMMENT = "new-comment"
    COMMENT_UPDATED = "comment-updated"
    COMMENT_DELETED = "comment-deleted"
    BOOKMARK_UPDATED = "bookmark-updated"
    LIKES_UPDATED = "likes-updated"
    NEW_MESSAGE = "new-message"
    USER_STATUS_CHANGE = "user-status-change"
