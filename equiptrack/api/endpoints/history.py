# equiptrack/api/endpoints/history.py

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_current_user, get_db_session
from equiptrack.models.user import User
from equiptrack.schemas.item import HistoryRead
from equiptrack.services import item_service

router = APIRouter(prefix="/api/history", tags=["History"])


@router.get("", response_model=List[HistoryRead])
async def list_history(
    department_id: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    return await item_service.list_history(session, current_user, department_id)
