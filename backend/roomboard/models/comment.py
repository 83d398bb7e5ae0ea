"""
SQLAlchemy ORM model for threaded Comment.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship, backref

from .base import Base, utcnow


class Comment(Base):
    """
    Represents a comment on a post, optionally replying to another comment.
    Deleting a comment deletes its replies.
    """

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    postId = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    userId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parentId = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    content = Column(String, nullable=False)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    editedAt = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    post = relationship("Post", back_populates="comments")
    user = relationship("User")
    replies = relationship(
        "Comment",
        cascade="all, delete-orphan",
        backref=backref("parent", remote_side=[id]),
    )
