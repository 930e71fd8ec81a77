from datetime import datetime

from sqlmodel import SQLModel, Field

from equiptrack.models.common import utcnow
from equiptrack.models.enums import DevicePlatform


class DeviceToken(SQLModel):
    user_id: str
    token: str
    platform: DevicePlatform = DevicePlatform.Android
    updated_at: datetime = Field(default_factory=utcnow)
