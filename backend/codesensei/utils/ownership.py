"""
Ownership checks shared by the per-user resource routes.
"""

from typing import Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import AuthorizationError, NotFoundError


ModelT = TypeVar("ModelT")


async def get_owned_or_raise(
    db: AsyncSession,
    model: Type[ModelT],
    resource_id: int,
    user_id: int,
    label: str
) -> ModelT:
    """
    Load ``model`` by id and check it belongs to ``user_id``.

    Raises ``NotFoundError`` (404) when the row does not exist and
    ``AuthorizationError`` (403) when it belongs to another user.
    """
    result = await db.execute(select(model).filter(model.id == resource_id))
    instance = result.scalar_one_or_none()

    if instance is None:
        raise NotFoundError(f"{label} not found", resource=label)

    if instance.user_id != user_id:
        raise AuthorizationError()

    return instance
