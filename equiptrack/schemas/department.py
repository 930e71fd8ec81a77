from typing import Optional

from pydantic import BaseModel


class DepartmentCreate(BaseModel):
    name: str
    requires_approval: bool = True
    parent_id: Optional[str] = None
    order: int = 0


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    requires_approval: Optional[bool] = None
    parent_id: Optional[str] = None


class DepartmentStructureUpdate(BaseModel):
    id: str
    parent_id: Optional[str] = None
    order: int = 0


class CategoryCreate(BaseModel):
    name: str
    color: str = "#999999"
