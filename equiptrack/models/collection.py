# equiptrack/models/collection.py

from datetime import datetime, timezone
from typing import Any, List

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, JSON, String


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionRecord(SQLModel, table=True):
    """
    One row per named collection. `data` always holds the complete,
    ordered list of records; writes replace it wholesale.
    """
    __tablename__ = "collections"

    name: str = Field(
        sa_column=Column(String(64), primary_key=True)
    )

    data: List[Any] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
