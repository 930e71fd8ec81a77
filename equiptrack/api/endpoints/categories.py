# equiptrack/api/endpoints/categories.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session, require_admin
from equiptrack.models.category import Category
from equiptrack.models.user import User
from equiptrack.schemas.department import CategoryCreate
from equiptrack.services import category_service

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=List[Category])
async def list_categories(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    return await category_service.list_categories(session)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await category_service.add_category(session, payload.name, payload.color)


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await category_service.delete_category(session, category_id)
