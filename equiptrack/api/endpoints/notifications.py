# equiptrack/api/endpoints/notifications.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session
from equiptrack.models.user import User
from equiptrack.schemas.auth import DeviceTokenRegister
from equiptrack.services.notification_service import register_device_token

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.post("/device-token")
async def save_device_token(
    payload: DeviceTokenRegister,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    await register_device_token(session, current_user.id, payload.token, payload.platform)
    return {"success": True}
