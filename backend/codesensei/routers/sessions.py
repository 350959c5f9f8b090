"""
Chat session management routes.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import get_db, get_session_factory
from ..models.user import User
from ..schemas.session import (
    SessionCreate,
    SessionUpdate,
    SessionReorder,
    SessionResponse,
    SessionWithMessages,
    MessageResponse
)
from ..services.message_store import MessageStore
from ..services.session_service import SessionService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


@router.get("")
async def list_sessions(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    include_messages: bool = Query(False, alias="includeMessages"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """List the current user's sessions, optionally with their messages."""
    sessions = await SessionService(db).list_for_user(current_user.id, page, page_size)

    if not include_messages:
        return {"sessions": [SessionResponse.model_validate(s) for s in sessions]}

    store = MessageStore(session_factory)
    result = []
    for s in sessions:
        messages = await store.list_by_session(s.id)
        result.append({
            **SessionResponse.model_validate(s).model_dump(),
            "messages": [MessageResponse.model_validate(m) for m in messages]
        })
    return {"sessions": result}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: SessionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a new chat session."""
    session = await SessionService(db).create(current_user.id, session_data)
    return {"session": SessionResponse.model_validate(session)}


@router.put("/reorder")
async def reorder_sessions(
    reorder: SessionReorder,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Move several sessions in the sidebar at once."""
    sessions = await SessionService(db).reorder(current_user.id, reorder.items)
    return {"sessions": [SessionResponse.model_validate(s) for s in sessions]}


@router.get("/{session_id}")
async def get_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Get a session with all its messages."""
    session = await SessionService(db).get_owned(session_id, current_user.id)
    messages = await MessageStore(session_factory).list_by_session(session.id)

    return {
        "session": SessionWithMessages(
            **SessionResponse.model_validate(session).model_dump(),
            messages=[MessageResponse.model_validate(m) for m in messages]
        )
    }


@router.patch("/{session_id}")
async def update_session(
    session_id: int,
    updates: SessionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Partially update a session."""
    session = await SessionService(db).update(session_id, current_user.id, updates)
    return {"session": SessionResponse.model_validate(session)}


@router.delete("/{session_id}")
async def delete_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a session and its messages."""
    await SessionService(db).delete(session_id, current_user.id)
    return {"success": True}
