# equiptrack/core/store.py

"""
Persistent collection store.

Every collection is read and written as a whole. There is no locking: two
operations that modify the same collection concurrently race, and the last
full write wins. Callers read a collection once per operation, mutate the
snapshot in memory and write the complete list back.
"""

import uuid
from datetime import datetime, timezone
from typing import Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.models.collection import CollectionRecord

T = TypeVar("T", bound=BaseModel)

# Collection names
DEPARTMENTS = "departments"
CATEGORIES = "categories"
ITEMS = "items"
USERS = "users"
REGISTRATION_REQUESTS = "registration_requests"
BORROW_REQUESTS = "borrow_requests"
DEVICE_TOKENS = "device_tokens"

ALL_COLLECTIONS = (
    DEPARTMENTS,
    CATEGORIES,
    ITEMS,
    USERS,
    REGISTRATION_REQUESTS,
    BORROW_REQUESTS,
    DEVICE_TOKENS,
)


def generate_id(prefix: str = "id") -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


async def read_all(session: AsyncSession, name: str, model: Type[T]) -> list[T]:
    """Return a point-in-time snapshot of the named collection."""
    result = await session.execute(
        select(CollectionRecord.data).where(CollectionRecord.name == name)
    )
    raw = result.scalar_one_or_none() or []
    return [model.model_validate(row) for row in raw]


async def write_all(session: AsyncSession, name: str, records: Sequence[BaseModel]) -> None:
    """Replace the named collection with `records` and commit."""
    payload = [r.model_dump(mode="json", exclude_none=True) for r in records]

    # Reload so change detection compares against what is stored now
    row = await session.get(CollectionRecord, name, populate_existing=True)
    if row is None:
        row = CollectionRecord(name=name, data=payload)
    else:
        row.data = payload
        row.updated_at = datetime.now(timezone.utc)

    session.add(row)
    await session.commit()
