"""
Learning plan Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import date, datetime

from .chat import ApiProvider


PlanStatus = Literal["pending", "in-progress", "completed"]
PlanCategory = Literal["frontend", "backend", "algorithm", "soft-skills"]


class PlanCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: PlanStatus = "pending"
    category: PlanCategory
    progress: int = Field(0, ge=0, le=100)
    start_date: date
    end_date: date


class PlanUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[PlanStatus] = None
    category: Optional[PlanCategory] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PlanResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    status: str
    category: str
    progress: int
    start_date: date
    end_date: date
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PlanGenerateRequest(BaseModel):
    """Body of ``POST /api/plan/generate``."""
    model_config = {"populate_by_name": True}

    topic: str = Field(..., min_length=1)
    level: str = Field(..., min_length=1)
    provider: Optional[ApiProvider] = None
    model: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")
    base_url: Optional[str] = Field(None, alias="baseUrl")


class PlanGenerateResponse(BaseModel):
    plans: List[PlanResponse] = []
