"""
Authentication service with user and settings management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, Dict, Any
import logging

from ..models.user import User, UserSettings
from ..schemas.user import UserRegister, UserLogin, Token
from ..errors import ValidationError, AuthenticationError
from ..utils.crypto import encrypt_provider_settings, decrypt_provider_settings
from ..utils.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token
)


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "theme": "light",
    "api_provider": "deepseek",
}


class AuthService:
    """Service for authentication and user management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, user_data: UserRegister) -> User:
        """Register a new user."""
        # Check if username exists
        result = await self.db.execute(
            select(User).filter(User.username == user_data.username)
        )
        if result.scalar_one_or_none():
            raise ValidationError("Username already registered", field="username")

        # Check if email exists
        result = await self.db.execute(
            select(User).filter(User.email == user_data.email)
        )
        if result.scalar_one_or_none():
            raise ValidationError("Email already registered", field="email")

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            full_name=user_data.full_name
        )
        self.db.add(user)
        await self.db.flush()

        self.db.add(UserSettings(user_id=user.id, provider_settings={}, **DEFAULT_SETTINGS))

        await self.db.commit()
        await self.db.refresh(user)

        logger.info("Registered user %s (%s)", user.id, user.username)
        return user

    async def authenticate(self, login_data: UserLogin) -> Optional[User]:
        """Authenticate a user by username and password."""
        result = await self.db.execute(
            select(User).filter(User.username == login_data.username)
        )
        user = result.scalar_one_or_none()

        if not user:
            return None

        if not verify_password(login_data.password, user.hashed_password):
            return None

        return user

    def create_tokens(self, user: User) -> Token:
        """Create access and refresh tokens for a user."""
        token_data = {"sub": str(user.id), "username": user.username}

        return Token(
            access_token=create_access_token(token_data),
            refresh_token=create_refresh_token(token_data)
        )

    async def refresh_tokens(self, refresh_token: str) -> Token:
        """Issue a new token pair from a refresh token."""
        token_data = decode_token(refresh_token, expected_type="refresh")

        user = await self.get_user_by_id(token_data.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid refresh token")

        return self.create_tokens(user)

    async def change_password(self, user: User, current_password: str, new_password: str) -> bool:
        """Change user password."""
        if not verify_password(current_password, user.hashed_password):
            return False

        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()

        return True

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User).filter(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_user_settings(self, user_id: int) -> Optional[UserSettings]:
        """Stored settings, provider secrets still encrypted."""
        result = await self.db.execute(
            select(UserSettings).filter(UserSettings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_settings(self, user_id: int) -> UserSettings:
        """Settings for a user, created with defaults on first access."""
        user_settings = await self.get_user_settings(user_id)
        if user_settings:
            return user_settings

        user_settings = UserSettings(user_id=user_id, provider_settings={}, **DEFAULT_SETTINGS)
        self.db.add(user_settings)
        await self.db.commit()
        await self.db.refresh(user_settings)

        logger.debug("Created default settings for user %s", user_id)
        return user_settings

    async def update_user_settings(self, user_id: int, updates: Dict[str, Any]) -> UserSettings:
        """Update settings; sensitive provider fields are encrypted before storage."""
        user_settings = await self.get_or_create_settings(user_id)

        for key, value in updates.items():
            if value is None or not hasattr(user_settings, key):
                continue
            if key == "provider_settings":
                value = encrypt_provider_settings(value)
            setattr(user_settings, key, value)

        await self.db.commit()
        await self.db.refresh(user_settings)

        return user_settings

    @staticmethod
    def settings_payload(user_settings: UserSettings) -> Dict[str, Any]:
        """Settings as returned to their owner, secrets decrypted."""
        return {
            "id": user_settings.id,
            "user_id": user_settings.user_id,
            "theme": user_settings.theme,
            "api_provider": user_settings.api_provider,
            "provider_settings": decrypt_provider_settings(user_settings.provider_settings or {}),
            "created_at": user_settings.created_at,
            "updated_at": user_settings.updated_at,
        }
