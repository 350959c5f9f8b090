"""
Chat session and message Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict
from datetime import datetime


class SessionCreate(BaseModel):
    """Schema for creating a session. Title and persona are checked by the service."""
    model_config = {"protected_namespaces": ()}

    title: Optional[str] = Field(None, max_length=200)
    persona_id: Optional[str] = Field(None, max_length=100)
    tags: List[str] = []
    system_prompt_override: Optional[str] = None
    model_params: Optional[Dict[str, Any]] = None
    custom_persona: Optional[Dict[str, Any]] = None


class SessionUpdate(BaseModel):
    """
    Partial session update.

    Only fields present in the request body are applied; an explicit ``null``
    clears a nullable field.
    """
    model_config = {"protected_namespaces": ()}

    title: Optional[str] = Field(None, max_length=200)
    persona_id: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    system_prompt_override: Optional[str] = None
    model_params: Optional[Dict[str, Any]] = None
    custom_persona: Optional[Dict[str, Any]] = None
    order_index: Optional[int] = None


class SessionOrder(BaseModel):
    id: int
    order_index: int


class SessionReorder(BaseModel):
    """Schema for batch reordering the sidebar."""
    items: List[SessionOrder]


class MessageResponse(BaseModel):
    """Message response schema."""
    model_config = {"from_attributes": True}

    id: int
    session_id: int
    role: str
    content: str
    is_thinking: bool = False
    created_at: datetime


class SessionResponse(BaseModel):
    """Session response schema."""
    model_config = {"from_attributes": True, "protected_namespaces": ()}

    id: int
    user_id: int
    title: str
    persona_id: str
    custom_persona: Optional[Dict[str, Any]] = None
    tags: List[str] = []
    system_prompt_override: Optional[str] = None
    model_params: Dict[str, Any] = {}
    order_index: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class SessionWithMessages(SessionResponse):
    """Session with full message history."""
    messages: List[MessageResponse] = []
