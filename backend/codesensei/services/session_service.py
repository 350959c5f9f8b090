"""
Chat session lifecycle: creation, updates, ordering and ownership.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func, desc
from typing import List, Optional
import logging

from ..constants import PRESET_PERSONAS_BY_ID
from ..errors import ValidationError, NotFoundError, AuthorizationError, translate_integrity_error
from ..models.chat import ChatSession
from ..models.persona import CustomPersona
from ..schemas.session import SessionCreate, SessionUpdate, SessionOrder
from ..utils.ownership import get_owned_or_raise


logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"

# Fields that must keep a value once set
REQUIRED_FIELDS = ("title", "persona_id", "order_index")

CREATE_ATTEMPTS = 5


def default_title(text: str) -> str:
    """Title for a new session derived from its first message (no LLM)."""
    text = (text or "").strip()
    if not text:
        return DEFAULT_TITLE

    # Use first 5 words or first 50 chars
    words = text.split()[:5]
    if len(words) >= 5:
        return " ".join(words) + "..."
    elif len(text) > 50:
        return text[:50] + "..."
    return text


class SessionService:
    """Service for chat session management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self):
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise translate_integrity_error(e)

    async def get_owned(self, session_id: int, user_id: int) -> ChatSession:
        """Load a session, 404 if it does not exist, 403 if it is someone else's."""
        return await get_owned_or_raise(self.db, ChatSession, session_id, user_id, "Session")

    async def list_for_user(self, user_id: int, page: int = 1, page_size: int = 20) -> List[ChatSession]:
        """Sessions of a user in sidebar order, newest first."""
        result = await self.db.execute(
            select(ChatSession)
            .filter(ChatSession.user_id == user_id)
            .order_by(desc(ChatSession.order_index))
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all())

    async def next_order_index(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.max(ChatSession.order_index)).filter(ChatSession.user_id == user_id)
        )
        current = result.scalar()
        return 0 if current is None else current + 1

    async def create(self, user_id: int, data: SessionCreate) -> ChatSession:
        """
        Create a session at the top of the user's list.

        Concurrent creates for one user can read the same next position; the
        loser of the unique ``(user_id, order_index)`` race recomputes it and
        tries again.
        """
        title = (data.title or "").strip()
        persona_id = (data.persona_id or "").strip()
        if not title or not persona_id:
            raise ValidationError("Title and persona_id are required")

        for attempt in range(1, CREATE_ATTEMPTS + 1):
            order_index = await self.next_order_index(user_id)
            session = ChatSession(
                user_id=user_id,
                title=title,
                persona_id=persona_id,
                tags=data.tags or [],
                system_prompt_override=data.system_prompt_override,
                model_params=data.model_params or {},
                custom_persona=data.custom_persona,
                order_index=order_index
            )
            self.db.add(session)
            try:
                await self.db.commit()
                break
            except IntegrityError as e:
                await self.db.rollback()
                if "order_index" not in str(e.orig) or attempt == CREATE_ATTEMPTS:
                    raise translate_integrity_error(e)
                logger.debug("order_index %s taken for user %s, retrying", order_index, user_id)

        await self.db.refresh(session)

        logger.info("Created session %s for user %s", session.id, user_id)
        return session

    async def update(self, session_id: int, user_id: int, patch: SessionUpdate) -> ChatSession:
        """
        Apply a partial update.

        Only fields present in the body change. An explicit ``null`` clears a
        nullable field; title, persona and position cannot be cleared.
        """
        session = await self.get_owned(session_id, user_id)
        changes = patch.model_dump(exclude_unset=True)

        for field in REQUIRED_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if isinstance(value, str):
                value = value.strip()
                changes[field] = value
            if value is None or value == "":
                raise ValidationError(f"{field} cannot be empty", field=field)

        if "tags" in changes and changes["tags"] is None:
            changes["tags"] = []
        if "model_params" in changes and changes["model_params"] is None:
            changes["model_params"] = {}

        for key, value in changes.items():
            setattr(session, key, value)

        await self._commit()
        await self.db.refresh(session)
        return session

    async def delete(self, session_id: int, user_id: int):
        """Delete a session; its messages go with it."""
        session = await self.get_owned(session_id, user_id)
        await self.db.delete(session)
        await self.db.commit()
        logger.info("Deleted session %s", session_id)

    async def reorder(self, user_id: int, items: List[SessionOrder]) -> List[ChatSession]:
        """
        Move several sessions at once, in one transaction.

        Positions are parked on negative values first so that swapping two
        sessions does not trip the per-user uniqueness constraint mid-way.
        """
        ids = [item.id for item in items]
        indices = [item.order_index for item in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate session id in reorder request", field="items")
        if len(set(indices)) != len(indices):
            raise ValidationError("Duplicate order_index in reorder request", field="items")
        if any(index < 0 for index in indices):
            raise ValidationError("order_index must not be negative", field="order_index")
        if not items:
            return []

        result = await self.db.execute(select(ChatSession).filter(ChatSession.id.in_(ids)))
        sessions = {session.id: session for session in result.scalars().all()}

        for session_id in ids:
            session = sessions.get(session_id)
            if session is None:
                raise NotFoundError("Session not found", resource="Session")
            if session.user_id != user_id:
                raise AuthorizationError()

        for position, item in enumerate(items):
            sessions[item.id].order_index = -(position + 1)

        try:
            await self.db.flush()
            for item in items:
                sessions[item.id].order_index = item.order_index
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise translate_integrity_error(e)

        for session in sessions.values():
            await self.db.refresh(session)
        return [sessions[session_id] for session_id in ids]

    async def resolve_system_prompt(self, session: ChatSession) -> Optional[str]:
        """
        System prompt for a session.

        Precedence: the session's override, the custom persona snapshot, the
        user's custom persona, then the preset persona.
        """
        if session.system_prompt_override:
            return session.system_prompt_override

        snapshot = session.custom_persona
        if isinstance(snapshot, dict):
            prompt = snapshot.get("system_prompt") or snapshot.get("systemPrompt")
            if prompt:
                return prompt

        persona_id = session.persona_id or ""
        if persona_id.isdigit():
            result = await self.db.execute(
                select(CustomPersona).filter(
                    CustomPersona.id == int(persona_id),
                    CustomPersona.user_id == session.user_id
                )
            )
            persona = result.scalar_one_or_none()
            if persona:
                return persona.system_prompt

        preset = PRESET_PERSONAS_BY_ID.get(persona_id)
        return preset["system_prompt"] if preset else None
