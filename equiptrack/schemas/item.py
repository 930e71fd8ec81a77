from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from equiptrack.models.common import BorrowerInfo
from equiptrack.models.enums import BorrowStatus
from equiptrack.models.item import EquipmentItem


# ---------------------------------------------------------
# CREATE / UPDATE
# ---------------------------------------------------------
class ItemCreate(BaseModel):
    name: str
    category_id: str
    department_id: str
    total_quantity: int = Field(default=1, ge=0)
    requires_approval: Optional[bool] = None
    image: Optional[str] = None
    image_full: Optional[str] = None
    photos: List[str] = Field(default_factory=list)


class ItemUpdate(BaseModel):
    """Only fields that are explicitly sent are applied; `requires_approval: null` clears the override."""

    name: Optional[str] = None
    category_id: Optional[str] = None
    department_id: Optional[str] = None
    total_quantity: Optional[int] = Field(default=None, ge=0)
    requires_approval: Optional[bool] = None
    image: Optional[str] = None
    image_full: Optional[str] = None
    photos: Optional[List[str]] = None


# ---------------------------------------------------------
# READ (derived figures, never stored)
# ---------------------------------------------------------
class ItemRead(EquipmentItem):
    # Raw stock minus units held by pending requests
    available_quantity: int = 0
    pending_approval_quantity: int = 0
    effective_requires_approval: bool = True


# ---------------------------------------------------------
# BORROW / RETURN
# ---------------------------------------------------------
class BorrowPayload(BaseModel):
    borrower: Optional[BorrowerInfo] = None
    expected_return_date: datetime
    photo: Optional[str] = None
    quantity: int = Field(default=1, ge=1)


class ReturnPayload(BaseModel):
    photo: Optional[str] = None
    is_forced: bool = False
    admin_name: Optional[str] = None


class HistoryRead(BaseModel):
    id: str
    item_id: str
    item_name: str
    item_category: str
    item_image: Optional[str] = None
    department_id: str
    borrower: BorrowerInfo
    operator: Optional[BorrowerInfo] = None
    borrow_date: datetime
    expected_return_date: datetime
    return_date: Optional[datetime] = None
    status: BorrowStatus
    photo: Optional[str] = None
    return_photo: Optional[str] = None
    forced_return_by: Optional[str] = None
