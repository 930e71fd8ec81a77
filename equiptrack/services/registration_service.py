# equiptrack/services/registration_service.py

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import AlreadyProcessed, Forbidden, NotFound
from equiptrack.core.rbac import DEPARTMENT_MANAGER_ROLES
from equiptrack.models.department import Department
from equiptrack.models.enums import RegistrationStatus, UserRole
from equiptrack.models.registration import RegistrationRequest
from equiptrack.models.user import User
from equiptrack.services import user_service


def _invited_by(request: RegistrationRequest, user: User) -> bool:
    if request.invited_by_user_id == user.id:
        return True
    return bool(user.invitation_code) and request.invitation_code == user.invitation_code


async def list_registrations(session: AsyncSession, caller: User) -> list[RegistrationRequest]:
    requests = await store.read_all(session, store.REGISTRATION_REQUESTS, RegistrationRequest)
    pending = [r for r in requests if r.status == RegistrationStatus.Pending]

    if caller.role == UserRole.SuperAdmin:
        return pending
    if caller.role in DEPARTMENT_MANAGER_ROLES:
        return [r for r in pending if _invited_by(r, caller)]
    return []


def _take_pending(
    requests: list[RegistrationRequest],
    request_id: str,
    caller: User,
) -> int:
    idx = next((i for i, r in enumerate(requests) if r.id == request_id), None)
    if idx is None:
        raise NotFound("Request not found")

    request = requests[idx]
    if request.status != RegistrationStatus.Pending:
        raise AlreadyProcessed("Request already processed")
    if caller.role != UserRole.SuperAdmin and not (
        caller.role in DEPARTMENT_MANAGER_ROLES and _invited_by(request, caller)
    ):
        raise Forbidden("Only the inviter or a super administrator can review this request")
    return idx


async def approve_registration(session: AsyncSession, request_id: str, caller: User) -> User:
    requests = await store.read_all(session, store.REGISTRATION_REQUESTS, RegistrationRequest)
    idx = _take_pending(requests, request_id, caller)
    request = requests[idx]

    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    dept = next((d for d in departments if d.name == request.department_name), None)
    if dept is None:
        raise NotFound(f"Department '{request.department_name}' not found")

    user = await user_service.create_user(
        session,
        name=request.name,
        contact=request.contact,
        role=UserRole.RegularUser,
        department_id=dept.id,
        password_hash=request.password_hash,
    )

    # Approved requests leave the queue
    del requests[idx]
    await store.write_all(session, store.REGISTRATION_REQUESTS, requests)

    logger.info(f"Registration of '{user.name}' approved by {caller.name}")
    return user


async def reject_registration(session: AsyncSession, request_id: str, caller: User) -> dict:
    requests = await store.read_all(session, store.REGISTRATION_REQUESTS, RegistrationRequest)
    idx = _take_pending(requests, request_id, caller)

    requests[idx].status = RegistrationStatus.Rejected
    await store.write_all(session, store.REGISTRATION_REQUESTS, requests)

    logger.info(f"Registration {request_id} rejected by {caller.name}")
    return {"message": "Rejected"}
