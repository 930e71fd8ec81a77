# equiptrack/api/endpoints/approvals.py

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_db_session, require_advanced_user
from equiptrack.models.user import User
from equiptrack.schemas.auth import RegistrationRead
from equiptrack.schemas.user import UserRead
from equiptrack.services import registration_service, user_service

router = APIRouter(prefix="/api/approvals", tags=["Registration Approvals"])


# 1️⃣ Pending registrations the caller may review
@router.get("", response_model=List[RegistrationRead])
async def list_pending(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    return await registration_service.list_registrations(session, current_user)


# 2️⃣ Approve: the applicant becomes a RegularUser
@router.post("/{request_id}", response_model=UserRead)
async def approve(
    request_id: str,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    user = await registration_service.approve_registration(session, request_id, current_user)
    [read] = await user_service.to_read(session, [user])
    return read


# 3️⃣ Reject
@router.delete("/{request_id}")
async def reject(
    request_id: str,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    return await registration_service.reject_registration(session, request_id, current_user)
