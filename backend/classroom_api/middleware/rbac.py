"""Role-Based Access Control: request authentication and the classroom ownership guard."""

import enum
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from classroom_api.database import get_db
from classroom_api.exceptions import ForbiddenError
from classroom_api.models.user import User, UserRole
from classroom_api.services.auth_service import decode_access_token
from classroom_api.services.user_service import get_user_by_id

logger = logging.getLogger(__name__)

# Bearer token extractor
security = HTTPBearer(auto_error=False)


class AccessDecision(str, enum.Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


def authorize(user, classroom) -> AccessDecision:
    """
    Decide whether ``user`` may mutate ``classroom``.
    Admins may mutate any classroom; everyone else only the ones they created.
    """
    if user.role == UserRole.ADMIN or user.id == classroom.created_by:
        return AccessDecision.ALLOW
    return AccessDecision.DENY


def ensure_can_modify(user, classroom) -> None:
    """Raise ForbiddenError unless ``authorize`` allows ``user`` to mutate ``classroom``."""
    if authorize(user, classroom) is AccessDecision.DENY:
        logger.warning("User %s denied write access to classroom %s", user.id, classroom.id)
        raise ForbiddenError("Forbidden")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the JWT token from the Authorization header.
    Returns the authenticated User object.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user

