# equiptrack/services/user_service.py

from typing import Any, Iterable, Mapping, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import Conflict, NotFound
from equiptrack.core.rbac import ensure_can_manage
from equiptrack.core.security import hash_password
from equiptrack.models.department import Department
from equiptrack.models.enums import UserRole, UserStatus
from equiptrack.models.user import User
from equiptrack.schemas.user import UserCreate, UserRead
from equiptrack.services import visibility_service


# ============================================================================
# LOOKUPS
# ============================================================================
def _find(users: list[User], user_id: str) -> int:
    clean_id = user_id.strip()
    for idx, user in enumerate(users):
        if user.id == clean_id:
            return idx
    raise NotFound("User not found")


async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    users = await store.read_all(session, store.USERS, User)
    return next((u for u in users if u.id == user_id), None)


async def get_user_by_contact(session: AsyncSession, contact: str) -> User | None:
    users = await store.read_all(session, store.USERS, User)
    return next((u for u in users if u.contact == contact), None)


def _check_unique(
    users: Iterable[User],
    contact: Optional[str],
    invitation_code: Optional[str],
    exclude_id: Optional[str] = None,
) -> None:
    for u in users:
        if u.id == exclude_id:
            continue
        if contact and u.contact == contact:
            raise Conflict("Contact is already registered")
        if invitation_code and u.invitation_code == invitation_code:
            raise Conflict("Invitation code already exists")


async def to_read(session: AsyncSession, users: Iterable[User]) -> list[UserRead]:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    names = {d.id: d.name for d in departments}
    return [
        UserRead(
            **u.model_dump(exclude={"password_hash"}),
            department_name=names.get(u.department_id),
        )
        for u in users
    ]


# ============================================================================
# CREATE (no authorization, used by seeding and registration approval)
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    contact: str,
    role: UserRole,
    department_id: Optional[str] = None,
    password: Optional[str] = None,
    password_hash: Optional[str] = None,
    invitation_code: Optional[str] = None,
) -> User:
    users = await store.read_all(session, store.USERS, User)
    _check_unique(users, contact, invitation_code)

    user = User(
        id=store.generate_id("user"),
        name=name,
        contact=contact,
        department_id=department_id,
        role=role,
        status=UserStatus.Active,
        password_hash=password_hash or hash_password(password or ""),
        invitation_code=invitation_code,
    )
    users.append(user)
    await store.write_all(session, store.USERS, users)

    logger.info(f"User '{name}' ({role.value}) created")
    return user


# ============================================================================
# MANAGEMENT (hierarchy gated)
# ============================================================================
async def list_users(
    session: AsyncSession,
    caller: User,
    department_id: Optional[str] = None,
) -> list[User]:
    users = await store.read_all(session, store.USERS, User)
    return visibility_service.filter_users(
        users, caller.role, caller.department_id, department_id
    )


async def get_user(session: AsyncSession, user_id: str) -> User:
    users = await store.read_all(session, store.USERS, User)
    return users[_find(users, user_id)]


async def add_user(session: AsyncSession, actor: User, data: UserCreate) -> User:
    ensure_can_manage(actor.role, data.role)
    return await create_user(
        session,
        name=data.name,
        contact=data.contact,
        role=data.role,
        department_id=data.department_id,
        password=data.password,
        invitation_code=data.invitation_code,
    )


async def update_user(
    session: AsyncSession,
    actor: User,
    user_id: str,
    changes: Mapping[str, Any],
) -> User:
    users = await store.read_all(session, store.USERS, User)
    idx = _find(users, user_id)
    target = users[idx]

    ensure_can_manage(actor.role, target.role)
    if changes.get("role") is not None:
        ensure_can_manage(actor.role, changes["role"])

    _check_unique(
        users,
        changes.get("contact"),
        changes.get("invitation_code"),
        exclude_id=target.id,
    )

    for field in ("name", "contact", "role", "status"):
        if changes.get(field) is not None:
            setattr(target, field, changes[field])
    # These two may be cleared explicitly
    for field in ("department_id", "invitation_code"):
        if field in changes:
            setattr(target, field, changes[field])
    if changes.get("password"):
        target.password_hash = hash_password(changes["password"])

    users[idx] = target
    await store.write_all(session, store.USERS, users)
    return target


async def delete_user(session: AsyncSession, actor: User, user_id: str) -> User:
    users = await store.read_all(session, store.USERS, User)
    idx = _find(users, user_id)
    target = users[idx]

    ensure_can_manage(actor.role, target.role)

    del users[idx]
    await store.write_all(session, store.USERS, users)

    logger.info(f"User '{target.name}' deleted by {actor.name}")
    return target
