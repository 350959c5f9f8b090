"""
User profile routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationError
from ..models.user import User
from ..schemas.user import ProfileUpdate, ProfileResponse
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/user", tags=["User"])

MAX_NAME_LENGTH = 50


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {"user": ProfileResponse.model_validate(current_user)}


@router.patch("/profile")
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update display name and avatar."""
    name = (profile.name or "").strip()
    if not name:
        raise ValidationError("Name cannot be empty", field="name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name cannot exceed {MAX_NAME_LENGTH} characters", field="name")

    current_user.full_name = name
    current_user.image = profile.image or None
    await db.commit()
    await db.refresh(current_user)

    return {"success": True, "user": ProfileResponse.model_validate(current_user)}
