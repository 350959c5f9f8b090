"""
Learning plan routes: AI generation and CRUD with soft delete.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from datetime import date
from typing import Optional
import logging

from ..constants import PLAN_PROMPT
from ..database import get_db, utcnow
from ..errors import NotFoundError, ValidationError
from ..models.plan import LearningPlan
from ..models.user import User
from ..schemas.chat import ChatTurn, CompletionRequest
from ..schemas.plan import (
    PlanCreate,
    PlanUpdate,
    PlanResponse,
    PlanGenerateRequest,
    PlanGenerateResponse,
    PlanStatus,
    PlanCategory
)
from ..services.auth_service import AuthService
from ..services.llm_factory import ClientFactory, get_client_factory, resolve_provider_config
from ..services.plan_service import extract_plan_items, build_learning_plans
from ..utils.ownership import get_owned_or_raise
from ..utils.security import get_current_user


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Plans"])


async def get_active_plan(db: AsyncSession, plan_id: int, user_id: int) -> LearningPlan:
    plan = await get_owned_or_raise(db, LearningPlan, plan_id, user_id, "Plan")
    if plan.deleted_at is not None:
        raise NotFoundError("Plan not found", resource="Plan")
    return plan


def check_dates(start_date: Optional[date], end_date: Optional[date]):
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date must not be before start_date", field="end_date")


@router.post("/plan/generate", response_model=PlanGenerateResponse)
async def generate_plan(
    request: PlanGenerateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    factory: ClientFactory = Depends(get_client_factory)
):
    """Ask the model for a staged plan and save one plan per stage."""
    user_settings = await AuthService(db).get_user_settings(current_user.id)
    client = factory(resolve_provider_config(request, user_settings))

    response = await client.chat(CompletionRequest(
        messages=[ChatTurn(role="user", content=PLAN_PROMPT.format(topic=request.topic, level=request.level))],
        temperature=0.7
    ))

    items = extract_plan_items(response.content)
    if not items:
        return {"plans": []}

    plans = build_learning_plans(current_user.id, items, date.today())
    db.add_all(plans)
    await db.commit()
    for plan in plans:
        await db.refresh(plan)

    logger.info("Generated %d plans for user %s", len(plans), current_user.id)
    return {"plans": [PlanResponse.model_validate(p) for p in plans]}


@router.get("/plans")
async def list_plans(
    status: Optional[PlanStatus] = None,
    category: Optional[PlanCategory] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the current user's plans, newest first, excluding deleted ones."""
    query = select(LearningPlan).filter(
        LearningPlan.user_id == current_user.id,
        LearningPlan.deleted_at.is_(None)
    )
    if status:
        query = query.filter(LearningPlan.status == status)
    if category:
        query = query.filter(LearningPlan.category == category)

    result = await db.execute(query.order_by(desc(LearningPlan.created_at), desc(LearningPlan.id)))
    return {"plans": [PlanResponse.model_validate(p) for p in result.scalars().all()]}


@router.post("/plans", status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_data: PlanCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    check_dates(plan_data.start_date, plan_data.end_date)

    plan = LearningPlan(user_id=current_user.id, **plan_data.model_dump())
    db.add(plan)
    await db.commit()
    await db.refresh(plan)

    return {"plan": PlanResponse.model_validate(plan)}


@router.patch("/plans/{plan_id}")
async def update_plan(
    plan_id: int,
    updates: PlanUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    plan = await get_active_plan(db, plan_id, current_user.id)
    changes = updates.model_dump(exclude_unset=True)

    for field in ("title", "status", "category", "progress", "start_date", "end_date"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be empty", field=field)

    check_dates(changes.get("start_date", plan.start_date), changes.get("end_date", plan.end_date))

    for key, value in changes.items():
        setattr(plan, key, value)

    await db.commit()
    await db.refresh(plan)

    return {"plan": PlanResponse.model_validate(plan)}


@router.delete("/plans/{plan_id}")
async def delete_plan(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Soft-delete a plan; it can be restored later."""
    plan = await get_active_plan(db, plan_id, current_user.id)
    plan.deleted_at = utcnow()
    await db.commit()

    return {"success": True}


@router.post("/plans/{plan_id}/restore")
async def restore_plan(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    plan = await get_owned_or_raise(db, LearningPlan, plan_id, current_user.id, "Plan")
    plan.deleted_at = None
    await db.commit()
    await db.refresh(plan)

    return {"plan": PlanResponse.model_validate(plan)}
