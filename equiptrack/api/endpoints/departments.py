# equiptrack/api/endpoints/departments.py

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.api.deps import get_db_session, require_admin
from equiptrack.models.department import Department
from equiptrack.models.user import User
from equiptrack.schemas.department import (
    DepartmentCreate,
    DepartmentStructureUpdate,
    DepartmentUpdate,
)
from equiptrack.services import department_service

router = APIRouter(prefix="/api/departments", tags=["Departments"])


# Public: the signup form picks a department by name
@router.get("", response_model=List[Department])
async def list_departments(session: AsyncSession = Depends(get_db_session)):
    return await department_service.list_departments(session)


@router.post("", response_model=Department, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await department_service.add_department(
        session,
        name=payload.name,
        requires_approval=payload.requires_approval,
        parent_id=payload.parent_id,
        order=payload.order,
    )


# Declared before /{department_id} so "structure" is not taken for an id
@router.put("/structure", response_model=List[Department])
async def update_structure(
    payload: List[DepartmentStructureUpdate],
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await department_service.update_department_structure(session, payload)


@router.put("/{department_id}", response_model=Department)
async def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    # An explicit null parent moves the department to the root
    parent_id = (
        payload.parent_id
        if "parent_id" in payload.model_fields_set
        else department_service.KEEP_PARENT
    )
    return await department_service.update_department(
        session,
        department_id,
        name=payload.name,
        requires_approval=payload.requires_approval,
        parent_id=parent_id,
    )


@router.delete("/{department_id}")
async def delete_department(
    department_id: str,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await department_service.delete_department(session, department_id)
