# equiptrack/api/deps.py

from typing import AsyncGenerator

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core.security import decode_token
from equiptrack.core.database import get_session
from equiptrack.core.rbac import has_at_least
from equiptrack.services.user_service import get_user_by_id
from equiptrack.models.enums import UserRole, UserStatus
from equiptrack.models.user import User


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Get current logged-in user from JWT
# ------------------------------------------------------------
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:

    token = credentials.credentials

    try:
        payload = decode_token(token)
        user_id = payload.get("sub")

        if not user_id:
            raise HTTPException(401, "Invalid token payload")

    except jwt.InvalidTokenError:
        raise HTTPException(401, "Could not validate credentials")

    # The users collection is the source of truth, not the token claims
    user = await get_user_by_id(session, user_id)

    if not user:
        raise HTTPException(401, "User not found")

    if user.status == UserStatus.Banned:
        raise HTTPException(403, "Account is banned")

    return user


# ------------------------------------------------------------
# Role-based access control (by rank)
# ------------------------------------------------------------
def role_required(minimum: UserRole):
    """
    Enforces that the current user holds `minimum` or a more privileged role.
    """

    async def checker(current_user: User = Depends(get_current_user)):
        if not has_at_least(current_user.role, minimum):
            raise HTTPException(
                status_code=403,
                detail=f"Access denied for role '{current_user.role.value}'"
            )
        return current_user

    return checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------

require_super_admin = role_required(UserRole.SuperAdmin)
require_admin = role_required(UserRole.Admin)
require_advanced_user = role_required(UserRole.AdvancedUser)
