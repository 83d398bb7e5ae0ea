"""
Domain schemas for API requests and responses.

Create/Update schemas validate mutation payloads before they reach the
store; Read schemas are the canonical records returned by endpoints and
carried in realtime event payloads.
"""
import re
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import PostType

USERNAME_PATTERN = r"^[A-Za-z0-9_.]{3,32}$"
IMAGE_URL_RE = re.compile(r"^(https?://\S+|data:image/[A-Za-z0-9.+-]+;base64,\S+)$")


def _non_blank(value: str, field: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Registration payload (phone verification happens elsewhere)."""
    username: str = Field(..., pattern=USERNAME_PATTERN)
    fullname: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^\+?[0-9]{7,15}$")

    @field_validator("fullname")
    @classmethod
    def validate_fullname(cls, v: str) -> str:
        return _non_blank(v, "Full name")


class UserRead(BaseModel):
    """Public user record."""
    id: int
    username: str
    fullname: str
    isOnline: bool = False
    lastSeen: Optional[str] = None  # ISO 8601 datetime string
    createdAt: str  # ISO 8601 datetime string


class UserStatus(BaseModel):
    """Presence slot for one user."""
    userId: int
    online: bool
    lastSeen: Optional[str] = None


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


def _check_images(images: Optional[List[str]]) -> Optional[List[str]]:
    if images is None:
        return images
    for url in images:
        if not IMAGE_URL_RE.match(url):
            raise ValueError("Invalid image URL")
    if len(images) > 5:
        raise ValueError("A post can have at most 5 images")
    return images


class PostCreate(BaseModel):
    """Payload for creating a listing."""
    type: PostType
    title: str = Field(..., max_length=200)
    description: str
    price: Optional[int] = Field(None, ge=0)
    location: str
    images: List[str] = Field(default_factory=list)

    @field_validator("title", "description", "location")
    @classmethod
    def validate_required_text(cls, v: str, info) -> str:
        return _non_blank(v, info.field_name.capitalize())

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: List[str]) -> List[str]:
        return _check_images(v)

    @model_validator(mode="after")
    def validate_room_requirements(self) -> "PostCreate":
        """Room listings need at least one image and a price."""
        if self.type == PostType.ROOM and (not self.images or self.price is None):
            raise ValueError("For room posts, images and price are required")
        return self


class PostUpdate(BaseModel):
    """
    Partial update of a listing. The room rule is checked by the store
    against the merged record.
    """
    type: Optional[PostType] = None
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("title", "description", "location")
    @classmethod
    def validate_required_text(cls, v: Optional[str], info) -> Optional[str]:
        if v is None:
            return v
        return _non_blank(v, info.field_name.capitalize())

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_images(v)

    @model_validator(mode="after")
    def validate_no_nulls(self) -> "PostUpdate":
        """Omitted fields stay as they are; only price may be cleared with null."""
        for name in ("type", "title", "description", "location", "images"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name.capitalize()} cannot be null")
        return self


class PostRead(BaseModel):
    """Canonical listing record."""
    id: int
    userId: int
    username: Optional[str] = None
    type: PostType
    title: str
    description: str
    price: Optional[int] = None
    location: str
    images: List[str] = Field(default_factory=list)
    createdAt: str
    editedAt: Optional[str] = None


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class CommentCreate(BaseModel):
    """Payload for commenting on a post, or replying to a comment."""
    content: str = Field(..., max_length=2000)
    parentId: Optional[int] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _non_blank(v, "Content")


class CommentUpdate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _non_blank(v, "Content")


class CommentRead(BaseModel):
    """Canonical comment record."""
    id: int
    postId: int
    userId: int
    username: Optional[str] = None
    parentId: Optional[int] = None
    content: str
    createdAt: str
    editedAt: Optional[str] = None


class CommentRef(BaseModel):
    """Identifies a deleted comment and the post whose thread held it."""
    id: int
    postId: int


# ---------------------------------------------------------------------------
# Likes and bookmarks
# ---------------------------------------------------------------------------


class LikeRead(BaseModel):
    id: int
    postId: int
    userId: int


class LikesRead(BaseModel):
    """All likes of a post."""
    likes: List[LikeRead] = Field(default_factory=list)
    count: int = 0


class LikeState(BaseModel):
    """Result of a like toggle, from the caller's point of view."""
    postId: int
    liked: bool
    count: int


class LikeCount(BaseModel):
    """Aggregate like count broadcast to everyone viewing a post."""
    postId: int
    count: int


class BookmarkState(BaseModel):
    postId: int
    bookmarked: bool


# ---------------------------------------------------------------------------
# Chats
# ---------------------------------------------------------------------------


class ChatCreate(BaseModel):
    """Open (or reopen) a direct chat with another user."""
    userId: int


class MessageCreate(BaseModel):
    content: str = Field(..., max_length=4000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _non_blank(v, "Message")


class MessageRead(BaseModel):
    """Canonical chat message record."""
    id: int
    chatId: int
    senderId: int
    username: Optional[str] = None
    content: str
    createdAt: str


class ChatRead(BaseModel):
    """Chat with its participants and the latest message."""
    id: int
    participants: List[UserRead] = Field(default_factory=list)
    lastMessage: Optional[MessageRead] = None
    createdAt: str
    updatedAt: str
