"""
Chat session and message database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class ChatSession(Base):
    """A conversation between a user and a persona."""

    __tablename__ = "chat_sessions"

    __table_args__ = (
        UniqueConstraint("user_id", "order_index", name="uq_chat_sessions_user_order"),
        Index("ix_chat_sessions_user_updated", "user_id", "updated_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)

    # Preset persona id ("mentor", ...) or the id of a custom persona
    persona_id = Column(String(100), nullable=False)
    custom_persona = Column(JSON, nullable=True)  # snapshot taken at selection time

    tags = Column(JSON, default=list)
    system_prompt_override = Column(Text, nullable=True)
    model_params = Column(JSON, default=dict)  # temperature, topK, maxOutputTokens

    # Manual ordering in the sidebar, unique per user
    order_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="sessions")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=lambda: [ChatMessage.created_at, ChatMessage.id]
    )


class ChatMessage(Base):
    """A single immutable turn in a chat session."""

    __tablename__ = "chat_messages"

    __table_args__ = (
        Index("ix_chat_messages_session_created", "session_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False)

    role = Column(String(20), nullable=False)  # "user", "model", "system"
    content = Column(Text, nullable=False, default="")
    is_thinking = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    session = relationship("ChatSession", back_populates="messages")
