from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from equiptrack.models.common import ensure_utc, utcnow
from equiptrack.models.enums import RegistrationStatus


class RegistrationRequest(SQLModel):
    id: str
    name: str
    contact: str
    department_name: str
    invitation_code: str
    invited_by_user_id: Optional[str] = None
    status: RegistrationStatus = RegistrationStatus.Pending
    created_at: datetime = Field(default_factory=utcnow)
    password_hash: str = ""

    @field_validator("created_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)
