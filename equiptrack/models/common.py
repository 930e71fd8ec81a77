# equiptrack/models/common.py

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class BorrowerInfo(SQLModel):
    """Snapshot of a person (borrower, applicant, operator or reviewer)."""

    id: Optional[str] = None
    name: str
    phone: str = ""
