from typing import Optional

from pydantic import BaseModel, Field

from equiptrack.models.enums import UserRole, UserStatus


# ---------------------------------------------------------
# BASE
# ---------------------------------------------------------
class UserBase(BaseModel):
    name: str
    contact: str


# ---------------------------------------------------------
# CREATE USER (by an account that outranks `role`)
# ---------------------------------------------------------
class UserCreate(UserBase):
    password: str = Field(min_length=4)
    role: UserRole = UserRole.RegularUser
    department_id: Optional[str] = None
    invitation_code: Optional[str] = None


# ---------------------------------------------------------
# UPDATE USER
# ---------------------------------------------------------
class UserUpdate(BaseModel):
    name: Optional[str] = None
    contact: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    department_id: Optional[str] = None
    invitation_code: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=4)


# ---------------------------------------------------------
# READ USER (response, never carries the password hash)
# ---------------------------------------------------------
class UserRead(UserBase):
    id: str
    role: UserRole
    status: UserStatus
    department_id: Optional[str] = None
    department_name: Optional[str] = None
    invitation_code: Optional[str] = None

    class Config:
        from_attributes = True
