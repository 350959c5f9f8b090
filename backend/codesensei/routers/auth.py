"""
Authentication routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import AuthenticationError, ValidationError
from ..schemas.user import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    Token,
    UserResponse,
    PasswordChange
)
from ..services.auth_service import AuthService
from ..utils.security import get_current_user
from ..models.user import User


router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    return await AuthService(db).register(user_data)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login and receive access tokens."""
    auth_service = AuthService(db)

    user = await auth_service.authenticate(login_data)
    if not user:
        raise AuthenticationError("Incorrect username or password")

    if not user.is_active:
        raise AuthenticationError("Account is disabled")

    return auth_service.create_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(request: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    """Refresh access token using refresh token."""
    return await AuthService(db).refresh_tokens(request.refresh_token)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/password")
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change user password."""
    success = await AuthService(db).change_password(
        current_user,
        password_data.current_password,
        password_data.new_password
    )

    if not success:
        raise ValidationError("Current password is incorrect", field="current_password")

    return {"message": "Password changed successfully"}
