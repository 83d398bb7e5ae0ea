"""
SQLAlchemy ORM models for the Roomboard backend.

This module exports the Base declarative base and all ORM models
for use by init_db and the application.
"""

from .base import Base

# Import all models to ensure they're registered with Base
from .user import User, Block
from .post import Post, Like, Bookmark
from .comment import Comment
from .chat import Chat, Message, chat_participants

__all__ = [
    "Base",
    "User",
    "Block",
    "Post",
    "Like",
    "Bookmark",
    "Comment",
    "Chat",
    "Message",
    "chat_participants",
]
