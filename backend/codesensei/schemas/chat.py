"""
Chat-related Pydantic schemas.

The HTTP bodies use camelCase field names (``sessionId``, ``systemPrompt``);
Python code addresses them by their snake_case attribute names.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Literal


class ApiProvider(str, Enum):
    """Supported upstream providers; all speak the OpenAI wire format."""
    DEEPSEEK = "deepseek"
    QWEN = "qwen"
    DOUBAO = "doubao"
    OPENAI = "openai"


class ChatTurn(BaseModel):
    """One role/content pair of a provider-agnostic conversation."""
    role: Literal["user", "assistant", "model", "system"]
    content: str


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat`` and ``POST /api/chat/stream``."""
    model_config = {"populate_by_name": True}

    session_id: Optional[int] = Field(None, alias="sessionId")
    persona_id: Optional[str] = Field(None, alias="personaId")
    messages: List[ChatTurn] = []
    system_prompt: Optional[str] = Field(None, alias="systemPrompt")

    provider: Optional[ApiProvider] = None
    model: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")
    base_url: Optional[str] = Field(None, alias="baseUrl")

    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, alias="maxTokens", gt=0)
    top_p: Optional[float] = Field(None, alias="topP", ge=0, le=1)
    top_k: Optional[int] = Field(None, alias="topK", gt=0)


class CompletionRequest(BaseModel):
    """Normalized request handed to the provider adapter."""
    messages: List[ChatTurn]
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None


class Usage(BaseModel):
    model_config = {"populate_by_name": True}

    prompt_tokens: int = Field(0, alias="promptTokens")
    completion_tokens: int = Field(0, alias="completionTokens")
    total_tokens: int = Field(0, alias="totalTokens")


class ChatCompletion(BaseModel):
    """Non-streaming chat response."""
    model_config = {"populate_by_name": True}

    id: str
    content: str
    model: str
    finish_reason: Optional[str] = Field(None, alias="finishReason")
    usage: Optional[Usage] = None
    session_id: Optional[int] = Field(None, alias="sessionId")


class ProviderConfig(BaseModel):
    """Per-request provider selection and credentials. Never persisted."""
    provider: ApiProvider
    api_key: str = ""
    base_url: Optional[str] = None
    model: Optional[str] = None
