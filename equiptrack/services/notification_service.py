# equiptrack/services/notification_service.py

import asyncio
from typing import Awaitable, Dict, Optional, Sequence

import httpx
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import database, store
from equiptrack.core.config import settings
from equiptrack.models.common import utcnow
from equiptrack.models.device_token import DeviceToken
from equiptrack.models.enums import DevicePlatform, UserRole
from equiptrack.models.user import User

# Strong references so detached tasks are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


# ---------------------------------------------------------
# DETACHED DELIVERY
# ---------------------------------------------------------
async def _guarded(coro: Awaitable, label: str) -> None:
    try:
        await coro
    except Exception:
        logger.exception(f"Notification '{label}' failed")


def fire_and_forget(coro: Awaitable, label: str = "notification") -> asyncio.Task:
    """
    Schedule `coro` as a detached task. Its failure is logged and never
    reaches the caller.
    """
    task = asyncio.create_task(_guarded(coro, label))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def drain() -> None:
    """Wait for in-flight notifications (used at shutdown and in tests)."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)


# ---------------------------------------------------------
# DEVICE TOKENS
# ---------------------------------------------------------
async def register_device_token(
    session: AsyncSession,
    user_id: str,
    token: str,
    platform: DevicePlatform,
) -> DeviceToken:
    tokens = await store.read_all(session, store.DEVICE_TOKENS, DeviceToken)

    existing = next((t for t in tokens if t.token == token), None)
    if existing:
        # A device may change hands
        existing.user_id = user_id
        existing.platform = platform
        existing.updated_at = utcnow()
        entry = existing
    else:
        entry = DeviceToken(user_id=user_id, token=token, platform=platform)
        tokens.append(entry)

    await store.write_all(session, store.DEVICE_TOKENS, tokens)
    logger.info(f"Device token registered for user {user_id}")
    return entry


# ---------------------------------------------------------
# PUSH
# ---------------------------------------------------------
async def send_push_notification(
    session: AsyncSession,
    user_ids: Sequence[str],
    title: str,
    body: str,
    data: Optional[Dict[str, str]] = None,
) -> None:
    if not settings.PUSH_GATEWAY_URL:
        logger.info(f"[Mock Push] To: {len(user_ids)} users, Title: {title}, Body: {body}")
        return

    tokens = await store.read_all(session, store.DEVICE_TOKENS, DeviceToken)
    wanted = set(user_ids)
    target_tokens = sorted({t.token for t in tokens if t.user_id in wanted})

    if not target_tokens:
        logger.info(f"No devices found for users: {', '.join(user_ids)}")
        return

    payload = {
        "tokens": target_tokens,
        "notification": {"title": title, "body": body},
        "data": data or {},
    }

    async with httpx.AsyncClient(timeout=settings.PUSH_GATEWAY_TIMEOUT) as client:
        response = await client.post(settings.PUSH_GATEWAY_URL, json=payload)
        response.raise_for_status()

    logger.info(f"Push sent to {len(target_tokens)} devices: {title}")


async def notify_users(
    user_ids: Sequence[str],
    title: str,
    body: str,
    data: Optional[Dict[str, str]] = None,
) -> None:
    """Runs on its own session; the originating request may already be finished."""
    if not user_ids:
        return
    async with database.AsyncSessionLocal() as session:
        await send_push_notification(session, user_ids, title, body, data)


async def notify_admins(
    title: str,
    body: str,
    data: Optional[Dict[str, str]] = None,
) -> None:
    async with database.AsyncSessionLocal() as session:
        users = await store.read_all(session, store.USERS, User)
        admin_ids = [
            u.id for u in users if u.role in (UserRole.SuperAdmin, UserRole.Admin)
        ]
        if admin_ids:
            await send_push_notification(session, admin_ids, title, body, data)
