# equiptrack/services/reservation_service.py

"""
Reservation calculator.

Pending borrow requests hold stock virtually: nothing is deducted from the
stored item until a request is approved. Every inventory read derives the
held quantity from the request queue instead of trusting a cached figure.
"""

from collections import defaultdict
from typing import Iterable, Mapping, Optional

from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.department import Department
from equiptrack.models.enums import BorrowRequestStatus
from equiptrack.models.item import EquipmentItem


def pending_reservations(requests: Iterable[BorrowRequestEntry]) -> dict[str, int]:
    held: dict[str, int] = defaultdict(int)
    for req in requests:
        if req.status == BorrowRequestStatus.Pending:
            held[req.item_id] += req.quantity
    return dict(held)


def effective_available(item: EquipmentItem, pending: Mapping[str, int]) -> int:
    return max(0, item.available_quantity - pending.get(item.id, 0))


def resolve_requires_approval(
    item: EquipmentItem,
    department: Optional[Department],
) -> bool:
    if item.requires_approval is not None:
        return item.requires_approval
    if department is not None and department.requires_approval is not None:
        return department.requires_approval
    return True
