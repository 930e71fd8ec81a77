# equiptrack/api/endpoints/items.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session, require_advanced_user
from equiptrack.core.rbac import ensure_at_least
from equiptrack.models.enums import UserRole
from equiptrack.models.item import EquipmentItem
from equiptrack.models.user import User
from equiptrack.schemas.item import (
    BorrowPayload,
    ItemCreate,
    ItemRead,
    ItemUpdate,
    ReturnPayload,
)
from equiptrack.services import item_service

router = APIRouter(prefix="/api/items", tags=["Items"])


# -------------------------------------------------------------------
# LIST / DETAIL
# -------------------------------------------------------------------
@router.get("", response_model=List[ItemRead])
async def list_items(
    department_id: Optional[str] = Query(None, description="Department id, or 'all'"),
    all_available: bool = False,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await item_service.list_items(
        session, current_user, department_id=department_id, all_available=all_available
    )


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(
    item_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    return await item_service.get_item(session, item_id)


# -------------------------------------------------------------------
# MANAGEMENT (AdvancedUser and above, own department)
# -------------------------------------------------------------------
@router.post("", response_model=EquipmentItem, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    return await item_service.add_item(session, current_user, payload)


@router.put("/{item_id}", response_model=EquipmentItem)
async def update_item(
    item_id: str,
    payload: ItemUpdate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    changes = payload.model_dump(exclude_unset=True)
    return await item_service.update_item(session, current_user, item_id, changes)


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(require_advanced_user),
):
    return await item_service.delete_item(session, current_user, item_id)


# -------------------------------------------------------------------
# BORROW / RETURN
# -------------------------------------------------------------------
@router.post("/{item_id}/borrow", response_model=EquipmentItem)
async def borrow_item(
    item_id: str,
    payload: BorrowPayload,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    # Regular users can only borrow for themselves
    if current_user.role == UserRole.RegularUser or payload.borrower is None:
        borrower = current_user.as_person()
    else:
        borrower = payload.borrower

    return await item_service.borrow_item(
        session,
        item_id,
        borrower=borrower,
        expected_return_date=payload.expected_return_date,
        operator=current_user.as_person(),
        photo=payload.photo,
        quantity=payload.quantity,
    )


@router.post("/{item_id}/return/{history_id}", response_model=EquipmentItem)
async def return_item(
    item_id: str,
    history_id: str,
    payload: Optional[ReturnPayload] = None,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    payload = payload or ReturnPayload()
    admin_name = None
    if payload.is_forced:
        ensure_at_least(current_user.role, UserRole.AdvancedUser)
        admin_name = payload.admin_name or current_user.name

    return await item_service.return_item(
        session,
        item_id,
        history_id,
        photo=payload.photo,
        is_forced=payload.is_forced,
        admin_name=admin_name,
    )
