# equiptrack/services/borrow_request_service.py

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import AlreadyProcessed, Forbidden, InsufficientStock, NotFound
from equiptrack.core.rbac import DEPARTMENT_MANAGER_ROLES, normalize_role
from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.common import BorrowerInfo, ensure_utc, utcnow
from equiptrack.models.department import Department
from equiptrack.models.enums import BorrowRequestStatus, UserRole
from equiptrack.models.item import EquipmentItem
from equiptrack.services import item_service, notification_service, visibility_service
from equiptrack.services.reservation_service import (
    effective_available,
    pending_reservations,
    resolve_requires_approval,
)

SYSTEM_OPERATOR = BorrowerInfo(name="System (Auto-Approved)", phone="")
SYSTEM_REVIEWER = BorrowerInfo(name="System", phone="")
AUTO_APPROVED_REMARK = "Approval not required"


def _find(requests: list[BorrowRequestEntry], request_id: str) -> int:
    for idx, req in enumerate(requests):
        if req.id == request_id:
            return idx
    raise NotFound("Request not found")


def _newest_first(requests: list[BorrowRequestEntry]) -> list[BorrowRequestEntry]:
    return sorted(requests, key=lambda r: r.created_at, reverse=True)


# ============================================================================
# CREATE
# ============================================================================
async def create_borrow_request(
    session: AsyncSession,
    item_id: str,
    borrower: BorrowerInfo,
    applicant: BorrowerInfo,
    expected_return_date: datetime,
    photo: Optional[str] = None,
    quantity: int = 1,
    note: Optional[str] = None,
) -> BorrowRequestEntry:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    item = next((i for i in items if i.id == item_id), None)
    if item is None:
        raise NotFound("Item not found")

    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    available = effective_available(item, pending_reservations(requests))
    if available < quantity:
        raise InsufficientStock(f"Insufficient stock, currently available: {available}")

    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    department = next((d for d in departments if d.id == item.department_id), None)

    now = utcnow()
    entry = BorrowRequestEntry(
        id=store.generate_id("brwreq"),
        item_id=item.id,
        item_department_id=item.department_id,
        item_name=item.name,
        item_image=item.image,
        borrower=borrower,
        applicant=applicant,
        quantity=quantity,
        expected_return_date=ensure_utc(expected_return_date),
        photo=photo,
        note=note,
        status=BorrowRequestStatus.Pending,
        created_at=now,
    )

    if not resolve_requires_approval(item, department):
        item_service.apply_loan(
            item,
            borrower=borrower,
            expected_return_date=entry.expected_return_date,
            operator=SYSTEM_OPERATOR,
            photo=photo,
            quantity=quantity,
        )
        await store.write_all(session, store.ITEMS, items)

        # Recorded for audit-trail parity with manually approved loans
        entry.status = BorrowRequestStatus.Approved
        entry.reviewed_at = now
        entry.reviewer = SYSTEM_REVIEWER
        entry.remark = AUTO_APPROVED_REMARK

        requests.append(entry)
        await store.write_all(session, store.BORROW_REQUESTS, requests)
        logger.info(f"Borrow request {entry.id} auto-approved ({item.name} x{quantity})")
        return entry

    requests.append(entry)
    await store.write_all(session, store.BORROW_REQUESTS, requests)
    logger.info(f"Borrow request {entry.id} pending review ({item.name} x{quantity})")

    notification_service.fire_and_forget(
        notification_service.notify_admins(
            "New borrow request",
            f"{applicant.name} requested {item.name} x{quantity}",
            {"type": "borrow_request", "requestId": entry.id},
        ),
        label="borrow_request",
    )
    return entry


# ============================================================================
# LIST
# ============================================================================
def _refresh_item_details(
    requests: list[BorrowRequestEntry],
    items: list[EquipmentItem],
) -> list[BorrowRequestEntry]:
    """Show the item's current name/image, it may have been renamed."""
    by_id = {i.id: i for i in items}
    refreshed = []
    for req in requests:
        item = by_id.get(req.item_id)
        if item:
            req = req.model_copy(update={"item_name": item.name, "item_image": item.image})
        refreshed.append(req)
    return refreshed


async def list_my_borrow_requests(
    session: AsyncSession,
    user_id: str,
    user_contact: Optional[str] = None,
) -> list[BorrowRequestEntry]:
    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    mine = visibility_service.filter_my_requests(requests, user_id, user_contact)

    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    return _newest_first(_refresh_item_details(mine, items))


async def list_review_borrow_requests(
    session: AsyncSession,
    user_role: UserRole,
    department_id: Optional[str] = None,
    status: Optional[BorrowRequestStatus] = None,
) -> list[BorrowRequestEntry]:
    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    queue = visibility_service.filter_review_queue(
        requests,
        user_role,
        department_id,
        status or BorrowRequestStatus.Pending,
    )
    if not queue:
        return []

    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    return _newest_first(_refresh_item_details(queue, items))


# ============================================================================
# REVIEW
# ============================================================================
def _ensure_can_review(
    req: BorrowRequestEntry,
    reviewer_role,
    reviewer_department_id: Optional[str],
) -> None:
    if req.status != BorrowRequestStatus.Pending:
        raise AlreadyProcessed("Request already processed")

    role = normalize_role(reviewer_role)
    if role == UserRole.SuperAdmin:
        return
    if role not in DEPARTMENT_MANAGER_ROLES:
        raise Forbidden("Only administrators can review borrow requests")
    if not reviewer_department_id or reviewer_department_id != req.item_department_id:
        raise Forbidden("Requests of other departments cannot be reviewed")


def _notify_applicant(req: BorrowRequestEntry, title: str, body: str, kind: str) -> None:
    if not (req.applicant and req.applicant.id):
        return
    notification_service.fire_and_forget(
        notification_service.notify_users(
            [req.applicant.id], title, body, {"type": kind, "requestId": req.id}
        ),
        label=kind,
    )


async def approve_borrow_request(
    session: AsyncSession,
    request_id: str,
    reviewer: BorrowerInfo,
    reviewer_role: UserRole,
    reviewer_department_id: Optional[str] = None,
    remark: Optional[str] = None,
) -> BorrowRequestEntry:
    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    idx = _find(requests, request_id)
    req = requests[idx]

    _ensure_can_review(req, reviewer_role, reviewer_department_id)

    # Raises InsufficientStock before the request is touched
    await item_service.borrow_item(
        session,
        req.item_id,
        borrower=req.borrower,
        expected_return_date=req.expected_return_date,
        operator=reviewer,
        photo=req.photo,
        quantity=req.quantity,
    )

    updated = req.model_copy(
        update={
            "status": BorrowRequestStatus.Approved,
            "remark": remark,
            "reviewed_at": utcnow(),
            "reviewer": reviewer,
        }
    )
    requests[idx] = updated
    await store.write_all(session, store.BORROW_REQUESTS, requests)
    logger.info(f"Borrow request {updated.id} approved by {reviewer.name}")

    _notify_applicant(
        updated,
        "Borrow request approved",
        f"Your request for {updated.item_name} was approved by {reviewer.name}",
        "borrow_approved",
    )
    return updated


async def reject_borrow_request(
    session: AsyncSession,
    request_id: str,
    reviewer: BorrowerInfo,
    reviewer_role: UserRole,
    reviewer_department_id: Optional[str] = None,
    remark: Optional[str] = None,
) -> BorrowRequestEntry:
    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    idx = _find(requests, request_id)
    req = requests[idx]

    _ensure_can_review(req, reviewer_role, reviewer_department_id)

    # No inventory change: the reservation simply stops being counted
    updated = req.model_copy(
        update={
            "status": BorrowRequestStatus.Rejected,
            "remark": remark,
            "reviewed_at": utcnow(),
            "reviewer": reviewer,
        }
    )
    requests[idx] = updated
    await store.write_all(session, store.BORROW_REQUESTS, requests)
    logger.info(f"Borrow request {updated.id} rejected by {reviewer.name}")

    _notify_applicant(
        updated,
        "Borrow request rejected",
        f"Your request for {updated.item_name} was rejected. Reason: {remark or 'none'}",
        "borrow_rejected",
    )
    return updated
