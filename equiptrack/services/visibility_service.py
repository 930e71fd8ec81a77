# equiptrack/services/visibility_service.py

"""
Pure list filters applied on top of store snapshots.

Read-only listings may cross departments when the caller asks explicitly;
management actions never rely on these filters and are gated by rank.
"""

from typing import Iterable, Optional, Sequence, TypeVar

from equiptrack.core.rbac import DEPARTMENT_MANAGER_ROLES, normalize_role
from equiptrack.models.borrow_request import BorrowRequestEntry
from equiptrack.models.enums import BorrowRequestStatus, UserRole

ALL_DEPARTMENTS = "all"

T = TypeVar("T")

# Marker for "the caller may not see anything"
_NOTHING = object()


def resolve_department_scope(
    role,
    own_department_id: Optional[str],
    requested_department_id: Optional[str] = None,
):
    """
    Returns None for "no department filter", a department id, or _NOTHING.
    """
    if requested_department_id == ALL_DEPARTMENTS:
        return None
    if requested_department_id:
        return requested_department_id
    if normalize_role(role) == UserRole.SuperAdmin:
        return None
    return own_department_id or _NOTHING


def _by_department(records: Iterable[T], scope, attr: str) -> list[T]:
    if scope is _NOTHING:
        return []
    if scope is None:
        return list(records)
    return [r for r in records if getattr(r, attr) == scope]


def filter_items(items, role, own_department_id=None, requested_department_id=None):
    scope = resolve_department_scope(role, own_department_id, requested_department_id)
    return _by_department(items, scope, "department_id")


def filter_users(users, role, own_department_id=None, requested_department_id=None):
    scope = resolve_department_scope(role, own_department_id, requested_department_id)
    return _by_department(users, scope, "department_id")


def filter_history(
    entries: Sequence,
    role,
    user_id: Optional[str],
    contact: Optional[str] = None,
    own_department_id: Optional[str] = None,
    requested_department_id: Optional[str] = None,
) -> list:
    """`entries` are flattened history rows carrying `department_id` and `borrower`."""
    role = normalize_role(role)

    if role == UserRole.SuperAdmin:
        if requested_department_id and requested_department_id != ALL_DEPARTMENTS:
            return [e for e in entries if e.department_id == requested_department_id]
        return list(entries)

    if role in DEPARTMENT_MANAGER_ROLES:
        if not own_department_id:
            return []
        return [e for e in entries if e.department_id == own_department_id]

    if not user_id:
        return []
    return [e for e in entries if is_borrower(e.borrower, user_id, contact)]


def is_borrower(person, user_id: Optional[str], contact: Optional[str]) -> bool:
    if person is None:
        return False
    if person.id and person.id == user_id:
        return True
    return bool(contact) and person.phone == contact


def filter_my_requests(
    requests: Iterable[BorrowRequestEntry],
    user_id: str,
    contact: Optional[str] = None,
) -> list[BorrowRequestEntry]:
    mine = []
    for req in requests:
        if req.applicant and req.applicant.id and req.applicant.id == user_id:
            mine.append(req)
        elif is_borrower(req.borrower, user_id, contact):
            mine.append(req)
    return mine


def filter_review_queue(
    requests: Iterable[BorrowRequestEntry],
    role,
    department_id: Optional[str] = None,
    status: BorrowRequestStatus = BorrowRequestStatus.Pending,
) -> list[BorrowRequestEntry]:
    role = normalize_role(role)
    matching = [r for r in requests if r.status == status]

    if role == UserRole.SuperAdmin:
        return matching
    if role not in DEPARTMENT_MANAGER_ROLES or not department_id:
        return []
    return [r for r in matching if r.item_department_id == department_id]
