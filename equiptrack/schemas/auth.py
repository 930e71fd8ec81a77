from pydantic import BaseModel, Field

from equiptrack.models.enums import DevicePlatform, RegistrationStatus
from equiptrack.schemas.user import UserRead


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    contact: str
    password: str


class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


# -------------------------------------------------------------------
# SIGNUP (self-registration, approved later by an administrator)
# -------------------------------------------------------------------
class SignupRequest(BaseModel):
    name: str
    contact: str
    department_name: str
    password: str = Field(min_length=4)
    invitation_code: str

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "name": "Li Wei",
                    "contact": "13800000001",
                    "department_name": "Technology",
                    "password": "secret123",
                    "invitation_code": "TECH-2024"
                }
            ]
        }


class RegistrationRead(BaseModel):
    id: str
    name: str
    contact: str
    department_name: str
    invitation_code: str
    invited_by_user_id: str | None = None
    status: RegistrationStatus

    class Config:
        from_attributes = True


class DeviceTokenRegister(BaseModel):
    token: str
    platform: DevicePlatform = DevicePlatform.Android
