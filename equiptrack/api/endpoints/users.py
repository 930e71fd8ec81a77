# equiptrack/api/endpoints/users.py

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session
from equiptrack.models.user import User
from equiptrack.schemas.user import UserCreate, UserRead, UserUpdate
from equiptrack.services import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# List users (department scoped unless SuperAdmin or ?department_id=all)
# -------------------------------------------------------------------
@router.get("", response_model=List[UserRead])
async def list_users(
    department_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    users = await user_service.list_users(session, current_user, department_id)
    return await user_service.to_read(session, users)


# -------------------------------------------------------------------
# Create a user of a lower role than the caller
# -------------------------------------------------------------------
@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    user = await user_service.add_user(session, current_user, payload)
    [read] = await user_service.to_read(session, [user])
    return read


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    user = await user_service.get_user(session, user_id)
    [read] = await user_service.to_read(session, [user])
    return read


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_unset=True)
    user = await user_service.update_user(session, current_user, user_id, changes)
    [read] = await user_service.to_read(session, [user])
    return read


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    deleted = await user_service.delete_user(session, current_user, user_id)
    return {"message": f"User '{deleted.name}' deleted"}
