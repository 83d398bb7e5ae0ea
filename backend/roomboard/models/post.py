"""
SQLAlchemy ORM models for Post and its per-user reactions (Like, Bookmark).
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Post(Base):
    """
    Represents a room or job listing.
    """

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    userId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False, index=True)  # PostType enum as string
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    price = Column(Integer, nullable=True)
    location = Column(String, nullable=False)
    images = Column(JSON, nullable=False, default=list)  # List of image URLs
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    editedAt = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="post", cascade="all, delete-orphan")


class Like(Base):
    """
    A user liking a post. At most one per (post, user).
    """

    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    postId = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    userId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    post = relationship("Post", back_populates="likes")

    __table_args__ = (
        UniqueConstraint("postId", "userId", name="uq_likes_post_user"),
    )


class Bookmark(Base):
    """
    A post saved by a user. Private to that user.
    """

    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    postId = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    userId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    post = relationship("Post", back_populates="bookmarks")

    __table_args__ = (
        UniqueConstraint("postId", "userId", name="uq_bookmarks_post_user"),
    )
