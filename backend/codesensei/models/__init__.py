"""
Database models package.
"""

from .user import User, UserSettings
from .chat import ChatSession, ChatMessage
from .persona import CustomPersona
from .plan import LearningPlan
from .question import InterviewQuestion, MistakeRecord
from .nav import NavItem

__all__ = [
    "User",
    "UserSettings",
    "ChatSession",
    "ChatMessage",
    "CustomPersona",
    "LearningPlan",
    "InterviewQuestion",
    "MistakeRecord",
    "NavItem",
]
