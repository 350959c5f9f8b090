"""
Custom persona database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text

from ..database import Base, utcnow


class CustomPersona(Base):
    """User-defined system prompt and style bundle."""

    __tablename__ = "custom_personas"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    role = Column(String(100), default="Custom")
    avatar = Column(String(50), default="🤖")
    avatar_image = Column(String(500), nullable=True)
    description = Column(Text, default="")
    system_prompt = Column(Text, nullable=False)
    greeting = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
