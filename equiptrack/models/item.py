# equiptrack/models/item.py

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from equiptrack.models.common import BorrowerInfo, ensure_utc
from equiptrack.models.enums import BorrowStatus, OPEN_BORROW_STATUSES


class BorrowHistoryEntry(SQLModel):
    """One unit on loan."""

    id: str
    item_id: str
    borrower: BorrowerInfo
    operator: Optional[BorrowerInfo] = None
    borrow_date: datetime
    expected_return_date: datetime
    return_date: Optional[datetime] = None
    status: BorrowStatus = BorrowStatus.Borrowed
    photo: Optional[str] = None
    return_photo: Optional[str] = None
    forced_return_by: Optional[str] = None

    @field_validator("borrow_date", "expected_return_date", "return_date")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_BORROW_STATUSES


class EquipmentItem(SQLModel):
    id: str
    name: str
    category_id: str
    department_id: str
    total_quantity: int = Field(default=1, ge=0)
    available_quantity: int = Field(default=1, ge=0)

    # None means "inherit from the department"; never materialized
    requires_approval: Optional[bool] = None

    image: Optional[str] = None
    image_full: Optional[str] = None
    photos: List[str] = Field(default_factory=list)
    borrow_history: List[BorrowHistoryEntry] = Field(default_factory=list)

    def open_loan_count(self) -> int:
        return sum(1 for h in self.borrow_history if h.is_open)
