"""
Navigation bookmark database model.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text

from ..database import Base, utcnow


class NavItem(Base):
    __tablename__ = "nav_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(1000), nullable=False)
    icon_url = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
