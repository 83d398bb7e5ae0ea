"""
SQLAlchemy ORM models for User and Block.
"""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class User(Base):
    """
    Represents a registered member who can post listings and chat.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    fullname = Column(String, nullable=False)
    phone = Column(String, nullable=True, unique=True)
    isOnline = Column(Boolean, nullable=False, default=False)
    lastSeen = Column(DateTime(timezone=True), nullable=True)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan")


class Block(Base):
    """
    A user (blocker) refusing direct messages from another user (blocked).
    """

    __tablename__ = "blocks"

    blockerId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    blockedId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False)
