"""
Authentication API routes.

Routes:
    POST   /api/v1/auth/register   — Create an account and log in
    POST   /api/v1/auth/sessions   — Create session (login)
    GET    /api/v1/auth/me         — Get current authenticated user
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from classroom_api.database import get_db
from classroom_api.models.user import User
from classroom_api.schemas.user import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from classroom_api.services.auth_service import authenticate_user, create_access_token
from classroom_api.services.user_service import create_user
from classroom_api.middleware.rbac import get_current_user

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a regular user account and return an access token for it."""
    try:
        user = await create_user(db, name=body.name, email=body.email, password=body.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return LoginResponse(
        access_token=create_access_token(user.id, user.role.value),
        user=UserResponse.model_validate(user),
    )


@router.post("/sessions", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new authentication session (login).
    Returns JWT access token and user profile.
    """
    user, error = await authenticate_user(db, body.email, body.password)
    if error:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error,
        )

    return LoginResponse(
        access_token=create_access_token(user.id, user.role.value),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_user: User = Depends(get_current_user),
):
    """Retrieve the currently authenticated user's profile."""
    return UserResponse.model_validate(current_user)
