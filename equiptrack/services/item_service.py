# equiptrack/services/item_service.py

from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import Forbidden, InsufficientStock, InvalidState, NotFound
from equiptrack.core.rbac import ensure_at_least
from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.common import BorrowerInfo, ensure_utc, utcnow
from equiptrack.models.department import Department
from equiptrack.models.enums import BorrowStatus, UserRole
from equiptrack.models.item import BorrowHistoryEntry, EquipmentItem
from equiptrack.models.user import User
from equiptrack.schemas.item import HistoryRead, ItemCreate, ItemRead
from equiptrack.services import visibility_service
from equiptrack.services.reservation_service import (
    effective_available,
    pending_reservations,
    resolve_requires_approval,
)

# Fields a plain update may touch. Quantities and history go through
# their own rules below. Required fields ignore null; the others may be
# cleared.
REQUIRED_FIELDS = {"name", "category_id", "department_id", "photos"}
CLEARABLE_FIELDS = {"requires_approval", "image", "image_full"}


def _find(items: list[EquipmentItem], item_id: str) -> int:
    for idx, item in enumerate(items):
        if item.id == item_id:
            return idx
    raise NotFound("Item not found")


# ============================================================================
# READ VIEWS
# ============================================================================
def display_status(entry: BorrowHistoryEntry, now: datetime) -> BorrowStatus:
    """Open loans past their due date are shown as overdue; nothing is stored."""
    if entry.status == BorrowStatus.Borrowed and now > entry.expected_return_date:
        return BorrowStatus.OverdueUnreturned
    return entry.status


def build_item_view(
    item: EquipmentItem,
    pending: Mapping[str, int],
    department: Optional[Department],
    now: Optional[datetime] = None,
) -> ItemRead:
    now = now or utcnow()
    view = ItemRead.model_validate(item.model_dump())
    view.available_quantity = effective_available(item, pending)
    view.pending_approval_quantity = pending.get(item.id, 0)
    view.effective_requires_approval = resolve_requires_approval(item, department)
    for entry in view.borrow_history:
        entry.status = display_status(entry, now)
    return view


async def _read_context(session: AsyncSession):
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    requests = await store.read_all(session, store.BORROW_REQUESTS, BorrowRequestEntry)
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    return items, pending_reservations(requests), {d.id: d for d in departments}


async def list_items(
    session: AsyncSession,
    caller: User,
    department_id: Optional[str] = None,
    all_available: bool = False,
) -> list[ItemRead]:
    items, pending, departments = await _read_context(session)
    visible = visibility_service.filter_items(
        items, caller.role, caller.department_id, department_id
    )

    now = utcnow()
    views = [
        build_item_view(item, pending, departments.get(item.department_id), now)
        for item in visible
    ]
    if all_available:
        views = [v for v in views if v.available_quantity > 0]
    return views


async def get_item(session: AsyncSession, item_id: str) -> ItemRead:
    items, pending, departments = await _read_context(session)
    item = items[_find(items, item_id)]
    return build_item_view(item, pending, departments.get(item.department_id))


async def get_raw_item(session: AsyncSession, item_id: str) -> EquipmentItem:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    return items[_find(items, item_id)]


# ============================================================================
# MANAGEMENT
# ============================================================================
def _ensure_can_manage_department(actor: User, department_id: str) -> None:
    ensure_at_least(actor.role, UserRole.AdvancedUser)
    if actor.role != UserRole.SuperAdmin and actor.department_id != department_id:
        raise Forbidden("Items of other departments cannot be managed")


async def add_item(session: AsyncSession, actor: User, data: ItemCreate) -> EquipmentItem:
    _ensure_can_manage_department(actor, data.department_id)

    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    item = EquipmentItem(
        id=store.generate_id("item"),
        name=data.name,
        category_id=data.category_id,
        department_id=data.department_id,
        total_quantity=data.total_quantity,
        available_quantity=data.total_quantity,
        requires_approval=data.requires_approval,
        image=data.image,
        image_full=data.image_full,
        photos=list(data.photos),
        borrow_history=[],
    )
    items.append(item)
    await store.write_all(session, store.ITEMS, items)

    logger.info(f"Item '{item.name}' ({item.id}) added by {actor.name}")
    return item


async def update_item(
    session: AsyncSession,
    actor: User,
    item_id: str,
    changes: Mapping[str, Any],
) -> EquipmentItem:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    idx = _find(items, item_id)
    item = items[idx]

    _ensure_can_manage_department(actor, item.department_id)
    if changes.get("department_id") and changes["department_id"] != item.department_id:
        _ensure_can_manage_department(actor, changes["department_id"])

    for field, value in changes.items():
        if field in REQUIRED_FIELDS and value is not None:
            setattr(item, field, value)
        elif field in CLEARABLE_FIELDS:
            setattr(item, field, value)

    new_total = changes.get("total_quantity")
    if new_total is not None:
        on_loan = item.open_loan_count()
        if new_total < on_loan:
            raise InvalidState(
                f"Total quantity {new_total} is below the {on_loan} units currently on loan"
            )
        item.total_quantity = new_total
        item.available_quantity = new_total - on_loan

    items[idx] = item
    await store.write_all(session, store.ITEMS, items)
    return item


async def delete_item(session: AsyncSession, actor: User, item_id: str) -> dict:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    item = items[_find(items, item_id)]
    _ensure_can_manage_department(actor, item.department_id)

    remaining = [i for i in items if i.id != item_id]
    await store.write_all(session, store.ITEMS, remaining)

    logger.info(f"Item '{item.name}' ({item.id}) deleted by {actor.name}")
    return {"message": "Item deleted"}


# ============================================================================
# BORROW / RETURN
# ============================================================================
def apply_loan(
    item: EquipmentItem,
    borrower: BorrowerInfo,
    expected_return_date: datetime,
    operator: Optional[BorrowerInfo] = None,
    photo: Optional[str] = None,
    quantity: int = 1,
) -> list[BorrowHistoryEntry]:
    """
    Mutate `item` in memory: one Borrowed entry per unit. Checks raw stock
    only; pending reservations are not consulted on this path.
    """
    if quantity < 1:
        raise InvalidState("Quantity must be at least 1")
    if item.available_quantity < quantity:
        raise InsufficientStock(
            f"Insufficient stock, currently available: {item.available_quantity}"
        )

    now = utcnow()
    expected = ensure_utc(expected_return_date)
    entries = [
        BorrowHistoryEntry(
            id=store.generate_id("hist"),
            item_id=item.id,
            borrower=borrower,
            operator=operator,
            borrow_date=now,
            expected_return_date=expected,
            status=BorrowStatus.Borrowed,
            photo=photo,
        )
        for _ in range(quantity)
    ]
    item.borrow_history.extend(entries)
    item.available_quantity -= quantity
    return entries


async def borrow_item(
    session: AsyncSession,
    item_id: str,
    borrower: BorrowerInfo,
    expected_return_date: datetime,
    operator: Optional[BorrowerInfo] = None,
    photo: Optional[str] = None,
    quantity: int = 1,
) -> EquipmentItem:
    """Commit a direct loan against raw stock and persist the item."""
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    idx = _find(items, item_id)
    item = items[idx]

    apply_loan(item, borrower, expected_return_date, operator, photo, quantity)

    items[idx] = item
    await store.write_all(session, store.ITEMS, items)

    logger.info(f"{borrower.name} borrowed {quantity} x '{item.name}' ({item.id})")
    return item


async def return_item(
    session: AsyncSession,
    item_id: str,
    history_entry_id: str,
    photo: Optional[str] = None,
    is_forced: bool = False,
    admin_name: Optional[str] = None,
) -> EquipmentItem:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    idx = _find(items, item_id)
    item = items[idx]

    entry = next((h for h in item.borrow_history if h.id == history_entry_id), None)
    if entry is None:
        raise NotFound("Borrow history not found")
    if not entry.is_open:
        raise InvalidState(f"Loan is already {entry.status.value}")

    # Forcing a return never changes the late/on-time outcome
    now = utcnow()
    entry.return_date = now
    entry.status = (
        BorrowStatus.ReturnedLate if now > entry.expected_return_date else BorrowStatus.Returned
    )
    if photo:
        entry.return_photo = photo
    if is_forced and admin_name:
        entry.forced_return_by = admin_name

    item.available_quantity = min(item.total_quantity, item.available_quantity + 1)

    items[idx] = item
    await store.write_all(session, store.ITEMS, items)

    logger.info(
        f"Loan {entry.id} of '{item.name}' returned ({entry.status.value})"
        + (f", forced by {admin_name}" if entry.forced_return_by else "")
    )
    return item


# ============================================================================
# HISTORY
# ============================================================================
async def list_history(
    session: AsyncSession,
    caller: User,
    department_id: Optional[str] = None,
) -> list[HistoryRead]:
    items = await store.read_all(session, store.ITEMS, EquipmentItem)

    now = utcnow()
    rows = []
    for item in items:
        for h in item.borrow_history:
            rows.append(
                HistoryRead(
                    **h.model_dump(exclude={"status", "item_id"}),
                    status=display_status(h, now),
                    item_id=item.id,
                    item_name=item.name,
                    item_category=item.category_id,
                    item_image=item.photos[0] if item.photos else item.image,
                    department_id=item.department_id,
                )
            )

    rows = visibility_service.filter_history(
        rows,
        caller.role,
        user_id=caller.id,
        contact=caller.contact,
        own_department_id=caller.department_id,
        requested_department_id=department_id,
    )
    rows.sort(key=lambda r: r.borrow_date, reverse=True)
    return rows
