# equiptrack/api/endpoints/auth.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_db_session
from equiptrack.schemas.auth import LoginRequest, SignupRequest, TokenWithUser
from equiptrack.services.auth_service import login, signup

router = APIRouter(prefix="/api", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
async def login_endpoint(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    return await login(session, payload.contact, payload.password)


# -------------------------------------------------------------------
# SIGNUP (needs an invitation code, reviewed under /api/approvals)
# -------------------------------------------------------------------
@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup_endpoint(
    payload: SignupRequest,
    session: AsyncSession = Depends(get_db_session)
):
    return await signup(session, payload)
