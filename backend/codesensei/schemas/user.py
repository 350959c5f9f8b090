"""
User-related Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


# ============= Auth Schemas =============

class UserRegister(BaseModel):
    """Schema for user registration."""
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    full_name: Optional[str] = Field(None, max_length=100)


class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[int] = None
    username: Optional[str] = None


class PasswordChange(BaseModel):
    """Schema for password change."""
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


# ============= User Response Schemas =============

class UserBase(BaseModel):
    """Base user schema."""
    username: str
    email: EmailStr
    full_name: Optional[str] = None


class UserResponse(UserBase):
    """User response schema."""
    model_config = {"from_attributes": True}

    id: int
    image: Optional[str] = None
    is_active: bool
    is_admin: bool
    created_at: datetime


class ProfileUpdate(BaseModel):
    """Schema for ``PATCH /api/user/profile``; ``name`` is checked by the route."""
    name: Optional[str] = None
    image: Optional[str] = None


class ProfileResponse(BaseModel):
    """Public profile with dashboard counters."""
    model_config = {"from_attributes": True}

    id: int
    username: str
    email: str
    name: Optional[str] = Field(None, validation_alias="full_name")
    image: Optional[str] = None
    level: int = 1
    xp: int = 0
    streak_days: int = 0
    completed_tasks: int = 0
    hours_focused: int = 0
    created_at: datetime
