"""
Learning plan database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text, Index

from ..database import Base, utcnow


class LearningPlan(Base):
    """A study-plan stage; soft-deleted via ``deleted_at``."""

    __tablename__ = "learning_plans"

    __table_args__ = (
        Index("ix_learning_plans_user_start", "user_id", "start_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="pending")  # pending, in-progress, completed
    category = Column(String(20), nullable=False)  # frontend, backend, algorithm, soft-skills
    progress = Column(Integer, default=0)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
