"""
Append-only message log for chat sessions.
"""

from typing import List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..models.chat import ChatMessage


logger = logging.getLogger(__name__)


class MessageStore:
    """
    Durable, ordered message log.

    Every write runs in its own short-lived database session, so an append
    issued after the request handler has returned (the model turn of a stream)
    does not depend on the request's session still being open.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def append(self, session_id: int, role: str, content: str) -> ChatMessage:
        async with self.session_factory() as db:
            message = ChatMessage(
                session_id=session_id,
                role=role,
                content=content,
                is_thinking=False
            )
            db.add(message)
            await db.commit()
            await db.refresh(message)

        logger.debug("Stored %s message %s in session %s", role, message.id, session_id)
        return message

    async def list_by_session(
        self,
        session_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[ChatMessage]:
        """Messages of a session, oldest first; ties broken by insertion order."""
        query = (
            select(ChatMessage)
            .filter(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        async with self.session_factory() as db:
            result = await db.execute(query)
            return list(result.scalars().all())
