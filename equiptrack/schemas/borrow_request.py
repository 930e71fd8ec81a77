from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from equiptrack.models.common import BorrowerInfo


class BorrowRequestCreate(BaseModel):
    item_id: str
    # Defaults to the caller; only administrators may borrow on behalf of others
    borrower: Optional[BorrowerInfo] = None
    expected_return_date: datetime
    photo: Optional[str] = None
    quantity: int = Field(default=1, ge=1)
    note: Optional[str] = None


class ReviewAction(BaseModel):
    remark: Optional[str] = None
