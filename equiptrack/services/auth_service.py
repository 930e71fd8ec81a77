# equiptrack/services/auth_service.py

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import AuthenticationFailed, Conflict, Forbidden, InvalidState
from equiptrack.core.security import create_access_token, hash_password, verify_password
from equiptrack.models.enums import RegistrationStatus, UserRole, UserStatus
from equiptrack.models.registration import RegistrationRequest
from equiptrack.models.user import User
from equiptrack.schemas.auth import SignupRequest, TokenWithUser
from equiptrack.services import user_service

# Roles whose invitation codes admit new members
INVITER_ROLES = (UserRole.SuperAdmin, UserRole.Admin, UserRole.AdvancedUser)


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, contact: str, password: str) -> User:
    users = await store.read_all(session, store.USERS, User)
    user = next((u for u in users if u.contact == contact), None)

    if user and verify_password(password, user.password_hash):
        if user.status == UserStatus.Banned:
            raise Forbidden("Account is banned, please contact an administrator")
        return user

    pending = await store.read_all(session, store.REGISTRATION_REQUESTS, RegistrationRequest)
    if any(r.contact == contact and r.status == RegistrationStatus.Pending for r in pending):
        raise Forbidden("Account is pending review")

    raise AuthenticationFailed("Invalid contact or password")


async def create_login_response(session: AsyncSession, user: User) -> TokenWithUser:
    token = create_access_token(subject=user.id, data={"role": user.role.value})
    [user_read] = await user_service.to_read(session, [user])
    return TokenWithUser(access_token=token, user=user_read)


async def login(session: AsyncSession, contact: str, password: str) -> TokenWithUser:
    user = await authenticate_user(session, contact, password)
    logger.info(f"User '{user.name}' logged in")
    return await create_login_response(session, user)


# ============================================================================
# SIGNUP
# ============================================================================
async def signup(session: AsyncSession, data: SignupRequest) -> dict:
    users = await store.read_all(session, store.USERS, User)
    pending = await store.read_all(session, store.REGISTRATION_REQUESTS, RegistrationRequest)

    inviter = next(
        (
            u for u in users
            if u.invitation_code == data.invitation_code and u.role in INVITER_ROLES
        ),
        None,
    )
    if inviter is None:
        raise InvalidState("Invalid invitation code")

    open_requests = [r for r in pending if r.status == RegistrationStatus.Pending]
    if any(u.contact == data.contact for u in users) or any(
        r.contact == data.contact for r in open_requests
    ):
        raise Conflict("Contact is already registered or awaiting approval")
    if any(u.name == data.name for u in users) or any(
        r.name == data.name for r in open_requests
    ):
        raise Conflict("Name is already taken or awaiting approval")

    request = RegistrationRequest(
        id=store.generate_id("reg"),
        name=data.name,
        contact=data.contact,
        department_name=data.department_name,
        invitation_code=data.invitation_code,
        invited_by_user_id=inviter.id,
        status=RegistrationStatus.Pending,
        password_hash=hash_password(data.password),
    )
    pending.append(request)
    await store.write_all(session, store.REGISTRATION_REQUESTS, pending)

    logger.info(f"Registration request from '{data.name}' invited by {inviter.name}")
    return {"message": "Registration submitted, waiting for administrator approval."}
