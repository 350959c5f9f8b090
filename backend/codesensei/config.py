"""
Configuration settings for CodeSensei backend.
Uses pydantic-settings for environment variable support.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
import secrets
import os


def get_or_create_secret_key():
    """Get secret key from file or generate a new one."""
    secret_file = ".secret_key"
    if os.path.exists(secret_file):
        try:
            with open(secret_file, "r") as f:
                return f.read().strip()
        except OSError:
            pass

    key = secrets.token_urlsafe(32)
    try:
        with open(secret_file, "w") as f:
            f.write(key)
    except OSError:
        pass  # read-only fs, key lives for this process only

    return key


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "CodeSensei"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list = ["*"]

    # Database
    # resolved relative to this file (backend/codesensei/config.py -> backend/codesensei.db)
    _BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(_BASE_DIR, 'codesensei.db')}"

    # JWT Authentication
    SECRET_KEY: str = Field(default_factory=get_or_create_secret_key)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Settings encryption (64 hex chars = 32 bytes, AES-256-GCM)
    ENCRYPTION_KEY: Optional[str] = None

    # Chat
    DEFAULT_TEMPERATURE: float = 0.7
    CHAT_REQUEST_TIMEOUT: float = 120.0
    CHAT_STREAM_TIMEOUT: float = 120.0
    CHAT_STREAM_MAX_FRAGMENTS: int = 20000  # 0 disables the cap

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000


class ProviderEnvironment(BaseSettings):
    """
    Provider credentials taken from the environment.

    Instantiated on every lookup so that changes to the environment are
    picked up without restarting the process.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    DEFAULT_AI_PROVIDER: str = "deepseek"
    DEEPSEEK_API_KEY: str = ""
    QWEN_API_KEY: str = ""
    DOUBAO_API_KEY: str = ""
    OPENAI_API_KEY: str = ""


# Global settings instance
settings = Settings()
