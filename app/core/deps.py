"""FastAPI dependencies for authentication and tenant resolution."""

from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User
from app.services.auth import decode_access_token, get_user_by_id

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate JWT token, return current user."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication credentials")

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise _unauthorized("Invalid token payload")

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID in token")

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def get_active_business_id(current_user: User = Depends(get_current_user)) -> UUID:
    """Business the caller is acting for. Callers without one are unauthorized."""
    if current_user.business_id is None:
        raise _unauthorized("No business membership")
    return current_user.business_id
