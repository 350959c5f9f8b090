"""
Interview question and mistake log database models.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class InterviewQuestion(Base):
    """Practice question owned by a user."""

    __tablename__ = "interview_questions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    category = Column(String(100), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    difficulty = Column(String(10), nullable=False)  # Easy, Medium, Hard

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    mistakes = relationship("MistakeRecord", back_populates="question", cascade="all, delete-orphan")


class MistakeRecord(Base):
    """A question the user flagged as answered wrong."""

    __tablename__ = "mistake_records"

    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_mistake_records_user_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("interview_questions.id", ondelete="CASCADE"), nullable=False)

    ai_analysis = Column(Text, nullable=True)  # markdown
    review_count = Column(Integer, default=0)

    added_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    question = relationship("InterviewQuestion", back_populates="mistakes")
