"""
Services package.
"""

from .auth_service import AuthService
from .chat_relay import ChatRelay, RelayState
from .llm_factory import create_api_client, resolve_provider_config
from .llm_service import OpenAICompatibleAdapter
from .message_store import MessageStore
from .session_service import SessionService

__all__ = [
    "AuthService",
    "ChatRelay",
    "RelayState",
    "create_api_client",
    "resolve_provider_config",
    "OpenAICompatibleAdapter",
    "MessageStore",
    "SessionService"
]
