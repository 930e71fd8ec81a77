from typing import Optional

from sqlmodel import SQLModel, Field


class Department(SQLModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    order: int = 0

    # Default approval policy for items that do not override it
    requires_approval: Optional[bool] = Field(default=True)
