# equiptrack/models/borrow_request.py

from datetime import datetime
from typing import Optional

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from equiptrack.models.common import BorrowerInfo, ensure_utc, utcnow
from equiptrack.models.enums import BorrowRequestStatus


class BorrowRequestEntry(SQLModel):
    id: str
    item_id: str
    item_department_id: str
    item_name: Optional[str] = None
    item_image: Optional[str] = None

    borrower: BorrowerInfo
    applicant: BorrowerInfo

    # Units reserved from the item's raw available pool while Pending
    quantity: int = Field(default=1, ge=1)
    expected_return_date: datetime
    photo: Optional[str] = None
    note: Optional[str] = None

    status: BorrowRequestStatus = BorrowRequestStatus.Pending
    created_at: datetime = Field(default_factory=utcnow)
    reviewed_at: Optional[datetime] = None
    reviewer: Optional[BorrowerInfo] = None
    remark: Optional[str] = None

    @field_validator("expected_return_date", "created_at", "reviewed_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return ensure_utc(value)
