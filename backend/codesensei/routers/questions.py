"""
Interview question routes and the mistake log.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, desc
from typing import Optional

from ..database import get_db
from ..errors import ValidationError
from ..models.question import InterviewQuestion, MistakeRecord
from ..models.user import User
from ..schemas.question import (
    QuestionCreate,
    QuestionUpdate,
    QuestionResponse,
    MistakeRecordResponse,
    Difficulty
)
from ..utils.ownership import get_owned_or_raise
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/questions", tags=["Questions"])


async def load_mistake(db: AsyncSession, record_id: int) -> MistakeRecord:
    """Reload a mistake record with its question attached."""
    result = await db.execute(
        select(MistakeRecord)
        .options(selectinload(MistakeRecord.question))
        .filter(MistakeRecord.id == record_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("")
async def list_questions(
    category: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(InterviewQuestion).filter(InterviewQuestion.user_id == current_user.id)
    if category:
        query = query.filter(InterviewQuestion.category == category)
    if difficulty:
        query = query.filter(InterviewQuestion.difficulty == difficulty)

    result = await db.execute(query.order_by(desc(InterviewQuestion.created_at), desc(InterviewQuestion.id)))
    return {"questions": [QuestionResponse.model_validate(q) for q in result.scalars().all()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question(
    question_data: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    question = InterviewQuestion(user_id=current_user.id, **question_data.model_dump())
    db.add(question)
    await db.commit()
    await db.refresh(question)

    return {"question": QuestionResponse.model_validate(question)}


@router.get("/mistakes")
async def list_mistakes(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The current user's mistake log, most recently added first."""
    result = await db.execute(
        select(MistakeRecord)
        .options(selectinload(MistakeRecord.question))
        .filter(MistakeRecord.user_id == current_user.id)
        .order_by(desc(MistakeRecord.added_at), desc(MistakeRecord.id))
    )
    return {"mistakes": [MistakeRecordResponse.model_validate(m) for m in result.scalars().all()]}


@router.post("/mistakes/{record_id}/review")
async def review_mistake(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Count one more review of a logged mistake."""
    record = await get_owned_or_raise(db, MistakeRecord, record_id, current_user.id, "Mistake record")
    record.review_count = (record.review_count or 0) + 1
    await db.commit()

    return {"mistake": MistakeRecordResponse.model_validate(await load_mistake(db, record.id))}


@router.delete("/mistakes/{record_id}")
async def delete_mistake(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    record = await get_owned_or_raise(db, MistakeRecord, record_id, current_user.id, "Mistake record")
    await db.delete(record)
    await db.commit()

    return {"success": True}


@router.patch("/{question_id}")
async def update_question(
    question_id: int,
    updates: QuestionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    question = await get_owned_or_raise(db, InterviewQuestion, question_id, current_user.id, "Question")
    changes = updates.model_dump(exclude_unset=True)

    for field in ("category", "title", "difficulty"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be empty", field=field)

    for key, value in changes.items():
        setattr(question, key, value)

    await db.commit()
    await db.refresh(question)

    return {"question": QuestionResponse.model_validate(question)}


@router.delete("/{question_id}")
async def delete_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a question; it also leaves the mistake log."""
    question = await get_owned_or_raise(db, InterviewQuestion, question_id, current_user.id, "Question")
    await db.delete(question)
    await db.commit()

    return {"success": True}


@router.post("/{question_id}/mistake", status_code=status.HTTP_201_CREATED)
async def add_mistake(
    question_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Flag a question as answered wrong. Flagging twice returns the existing entry."""
    await get_owned_or_raise(db, InterviewQuestion, question_id, current_user.id, "Question")

    result = await db.execute(
        select(MistakeRecord).filter(
            MistakeRecord.user_id == current_user.id,
            MistakeRecord.question_id == question_id
        )
    )
    record = result.scalar_one_or_none()

    if record is None:
        record = MistakeRecord(user_id=current_user.id, question_id=question_id)
        db.add(record)
        await db.commit()

    return {"mistake": MistakeRecordResponse.model_validate(await load_mistake(db, record.id))}
