from datetime import timedelta

from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.common import BorrowerInfo, utcnow
from equiptrack.models.department import Department
from equiptrack.models.enums import BorrowRequestStatus
from equiptrack.models.item import EquipmentItem
from equiptrack.services.reservation_service import (
    effective_available,
    pending_reservations,
    resolve_requires_approval,
)

PERSON = BorrowerInfo(id="u1", name="Alice", phone="100")


def make_item(item_id="item_1", total=5, available=5, requires_approval=None):
    return EquipmentItem(
        id=item_id,
        name="Camera",
        category_id="cat_1",
        department_id="dept_1",
        total_quantity=total,
        available_quantity=available,
        requires_approval=requires_approval,
    )


def make_request(item_id="item_1", quantity=1, status=BorrowRequestStatus.Pending):
    return BorrowRequestEntry(
        id=f"req_{item_id}_{quantity}_{status.value}",
        item_id=item_id,
        item_department_id="dept_1",
        borrower=PERSON,
        applicant=PERSON,
        quantity=quantity,
        expected_return_date=utcnow() + timedelta(days=1),
        status=status,
    )


def test_only_pending_requests_hold_stock():
    held = pending_reservations(
        [
            make_request(quantity=2),
            make_request(quantity=1, status=BorrowRequestStatus.Approved),
            make_request(quantity=3, status=BorrowRequestStatus.Rejected),
            make_request(item_id="item_2", quantity=4),
        ]
    )
    assert held == {"item_1": 2, "item_2": 4}


def test_effective_available_subtracts_reservations():
    item = make_item(available=5)
    assert effective_available(item, {"item_1": 2}) == 3
    assert effective_available(item, {}) == 5


def test_effective_available_never_negative():
    item = make_item(available=1)
    assert effective_available(item, {"item_1": 3}) == 0


def test_item_override_wins_over_department():
    dept = Department(id="dept_1", name="Tech", requires_approval=True)
    assert resolve_requires_approval(make_item(requires_approval=False), dept) is False


def test_item_without_override_inherits_department():
    dept = Department(id="dept_1", name="Tech", requires_approval=False)
    assert resolve_requires_approval(make_item(), dept) is False


def test_approval_required_when_nothing_is_configured():
    dept = Department(id="dept_1", name="Tech", requires_approval=None)
    assert resolve_requires_approval(make_item(), dept) is True
    assert resolve_requires_approval(make_item(), None) is True
