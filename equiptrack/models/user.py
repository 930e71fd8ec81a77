# equiptrack/models/user.py

from typing import Optional

from sqlmodel import SQLModel

from equiptrack.models.common import BorrowerInfo
from equiptrack.models.enums import UserRole, UserStatus


class User(SQLModel):
    id: str
    name: str

    # Unique login identifier (usually a phone number)
    contact: str
    department_id: Optional[str] = None
    role: UserRole = UserRole.RegularUser
    status: UserStatus = UserStatus.Active
    password_hash: str = ""
    invitation_code: Optional[str] = None

    def as_person(self) -> BorrowerInfo:
        return BorrowerInfo(id=self.id, name=self.name, phone=self.contact)
