# equiptrack/api/endpoints/borrow_requests.py

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session
from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.enums import BorrowRequestStatus, UserRole
from equiptrack.models.user import User
from equiptrack.schemas.borrow_request import BorrowRequestCreate, ReviewAction
from equiptrack.services import borrow_request_service

router = APIRouter(prefix="/api/borrow-requests", tags=["Borrow Requests"])


# 1️⃣ Submit a request (auto-approved when the item needs no review)
@router.post("", response_model=BorrowRequestEntry, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: BorrowRequestCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    applicant = current_user.as_person()
    if current_user.role == UserRole.RegularUser or payload.borrower is None:
        borrower = applicant
    else:
        borrower = payload.borrower

    return await borrow_request_service.create_borrow_request(
        session,
        payload.item_id,
        borrower=borrower,
        applicant=applicant,
        expected_return_date=payload.expected_return_date,
        photo=payload.photo,
        quantity=payload.quantity,
        note=payload.note,
    )


# 2️⃣ The caller's own requests
@router.get("/my", response_model=List[BorrowRequestEntry])
async def my_requests(
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await borrow_request_service.list_my_borrow_requests(
        session, current_user.id, current_user.contact
    )


# 3️⃣ Review queue (empty for roles that cannot review)
@router.get("/review", response_model=List[BorrowRequestEntry])
async def review_queue(
    status: BorrowRequestStatus = BorrowRequestStatus.Pending,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await borrow_request_service.list_review_borrow_requests(
        session, current_user.role, current_user.department_id, status
    )


# 4️⃣ Approve
@router.post("/{request_id}/approve", response_model=BorrowRequestEntry)
async def approve_request(
    request_id: str,
    payload: Optional[ReviewAction] = None,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await borrow_request_service.approve_borrow_request(
        session,
        request_id,
        reviewer=current_user.as_person(),
        reviewer_role=current_user.role,
        reviewer_department_id=current_user.department_id,
        remark=payload.remark if payload else None,
    )


# 5️⃣ Reject
@router.post("/{request_id}/reject", response_model=BorrowRequestEntry)
async def reject_request(
    request_id: str,
    payload: Optional[ReviewAction] = None,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await borrow_request_service.reject_borrow_request(
        session,
        request_id,
        reviewer=current_user.as_person(),
        reviewer_role=current_user.role,
        reviewer_department_id=current_user.department_id,
        remark=payload.remark if payload else None,
    )
