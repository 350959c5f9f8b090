"""
User settings Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Optional, Dict, Any, Literal
from datetime import datetime

from .chat import ApiProvider


Theme = Literal["light", "dark", "matrix"]


class UserSettingsUpdate(BaseModel):
    """Schema for updating settings; omitted fields keep their value."""
    theme: Optional[Theme] = None
    api_provider: Optional[ApiProvider] = None
    provider_settings: Optional[Dict[str, Any]] = None


class UserSettingsResponse(BaseModel):
    """Settings response schema, with provider secrets decrypted."""
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    theme: str
    api_provider: str
    provider_settings: Dict[str, Any] = {}
    created_at: datetime
    updated_at: Optional[datetime] = None
