"""
Persona Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PersonaCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = Field(None, max_length=50)
    avatar_image: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None
    greeting: Optional[str] = None


class PersonaUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = Field(None, max_length=50)
    avatar_image: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None
    greeting: Optional[str] = None


class PersonaResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    name: str
    role: str
    avatar: str
    avatar_image: Optional[str] = None
    description: str = ""
    system_prompt: str
    greeting: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PresetPersona(BaseModel):
    """Built-in persona shipped with the application."""
    id: str
    name: str
    role: str
    avatar: str
    description: str
    system_prompt: str
    greeting: Optional[str] = None
