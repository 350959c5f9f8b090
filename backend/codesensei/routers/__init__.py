"""
API Routers package.
"""

from .analysis import router as analysis_router
from .auth import router as auth_router
from .chat import router as chat_router
from .nav import router as nav_router
from .personas import router as personas_router
from .plans import router as plans_router
from .questions import router as questions_router
from .sessions import router as sessions_router
from .settings import router as settings_router
from .user import router as user_router

__all__ = [
    "analysis_router",
    "auth_router",
    "chat_router",
    "nav_router",
    "personas_router",
    "plans_router",
    "questions_router",
    "sessions_router",
    "settings_router",
    "user_router"
]
