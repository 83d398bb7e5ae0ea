"""
Request, response and record schemas for API endpoints.
"""
from .responses import (
    ApiResponse,
    ErrorResponse,
    Deleted,
)
from .enums import PostType, EventKind
from .domain import (
    UserCreate,
    UserRead,
    UserStatus,
    PostCreate,
    PostUpdate,
    PostRead,
    CommentCreate,
    CommentUpdate,
    CommentRead,
    CommentRef,
    LikeRead,
    LikesRead,
    LikeState,
    LikeCount,
    BookmarkState,
    ChatCreate,
    ChatRead,
    MessageCreate,
    MessageRead,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "Deleted",
    "PostType",
    "EventKind",
    "UserCreate",
    "UserRead",
    "UserStatus",
    "PostCreate",
    "PostUpdate",
    "PostRead",
    "CommentCreate",
    "CommentUpdate",
    "CommentRead",
    "CommentRef",
    "LikeRead",
    "LikesRead",
    "LikeState",
    "LikeCount",
    "BookmarkState",
    "ChatCreate",
    "ChatRead",
    "MessageCreate",
    "MessageRead",
]
