"""
Navigation bookmark Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class NavItemCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    url: Optional[str] = Field(None, max_length=1000)
    icon_url: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, max_length=100)


class NavItemUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    url: Optional[str] = Field(None, min_length=1, max_length=1000)
    icon_url: Optional[str] = Field(None, max_length=1000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)


class NavItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    url: str
    icon_url: Optional[str] = None
    category: str
    created_at: datetime
    updated_at: Optional[datetime] = None
