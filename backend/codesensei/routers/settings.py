"""
User settings routes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.settings import UserSettingsResponse, UserSettingsUpdate
from ..models.user import User
from ..services.auth_service import AuthService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("")
async def get_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get current user settings, creating defaults on first access."""
    auth_service = AuthService(db)
    user_settings = await auth_service.get_or_create_settings(current_user.id)

    return {"settings": UserSettingsResponse(**auth_service.settings_payload(user_settings))}


@router.put("")
async def update_settings(
    updates: UserSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update user settings. Provider secrets are encrypted at rest."""
    auth_service = AuthService(db)
    user_settings = await auth_service.update_user_settings(
        current_user.id,
        updates.model_dump(mode="json", exclude_unset=True)
    )

    return {"settings": UserSettingsResponse(**auth_service.settings_payload(user_settings))}
