"""
Interview question and mistake log Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

from .chat import ApiProvider


Difficulty = Literal["Easy", "Medium", "Hard"]


class QuestionCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    difficulty: Difficulty


class QuestionUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None


class QuestionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    category: str
    title: str
    description: Optional[str] = None
    difficulty: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class MistakeRecordResponse(BaseModel):
    """Mistake log entry with its question inlined."""
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    question_id: int
    ai_analysis: Optional[str] = None
    review_count: int
    added_at: datetime
    question: Optional[QuestionResponse] = None


class AnalysisRequest(BaseModel):
    """Body of ``POST /api/analysis``."""
    model_config = {"populate_by_name": True}

    question_id: Optional[int] = Field(None, alias="questionId")
    question_title: Optional[str] = Field(None, alias="questionTitle")
    provider: Optional[ApiProvider] = None
    model: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")
    base_url: Optional[str] = Field(None, alias="baseUrl")


class AnalysisResponse(BaseModel):
    analysis: str
