"""
SQLAlchemy ORM models for Chat and Message.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Table
from sqlalchemy.orm import relationship

from .base import Base, utcnow


# Association table for many-to-many relationship between chats and users
chat_participants = Table(
    "chat_participants",
    Base.metadata,
    Column("chat_id", Integer, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Chat(Base):
    """
    Represents a direct conversation between two users.
    """

    __tablename__ = "chats"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updatedAt = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    participants = relationship("User", secondary=chat_participants)
    messages = relationship(
        "Message",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )


class Message(Base):
    """
    Represents a message in a chat.
    """

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    chatId = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    senderId = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(String, nullable=False)
    createdAt = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # Relationships
    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User")
