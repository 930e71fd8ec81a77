# equiptrack/services/department_service.py

from typing import Iterable, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import Conflict, NotFound
from equiptrack.models.department import Department
from equiptrack.models.item import EquipmentItem
from equiptrack.models.user import User
from equiptrack.schemas.department import DepartmentStructureUpdate

# Default for update_department: leave the parent as it is. None moves the
# department to the root.
KEEP_PARENT = object()


def _sorted(departments: Iterable[Department]) -> list[Department]:
    return sorted(departments, key=lambda d: (d.order, d.name))


def _with_defaults(dept: Department) -> Department:
    if dept.requires_approval is None:
        dept.requires_approval = True
    return dept


async def list_departments(session: AsyncSession) -> list[Department]:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    return _sorted(_with_defaults(d) for d in departments)


async def get_department(session: AsyncSession, department_id: str) -> Department:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    for d in departments:
        if d.id == department_id:
            return _with_defaults(d)
    raise NotFound("Department not found")


async def add_department(
    session: AsyncSession,
    name: str,
    requires_approval: bool = True,
    parent_id: Optional[str] = None,
    order: int = 0,
) -> Department:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)

    if parent_id and not any(d.id == parent_id for d in departments):
        raise NotFound("Parent department not found")
    if any(d.name == name and d.parent_id == parent_id for d in departments):
        raise Conflict("Department name already exists")

    dept = Department(
        id=store.generate_id("dept"),
        name=name,
        requires_approval=requires_approval,
        parent_id=parent_id,
        order=order,
    )
    departments.append(dept)
    await store.write_all(session, store.DEPARTMENTS, departments)

    logger.info(f"Department '{name}' created")
    return dept


async def update_department(
    session: AsyncSession,
    department_id: str,
    name: Optional[str] = None,
    requires_approval: Optional[bool] = None,
    parent_id=KEEP_PARENT,
) -> Department:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    dept = next((d for d in departments if d.id == department_id), None)
    if dept is None:
        raise NotFound("Department not found")

    new_parent = dept.parent_id if parent_id is KEEP_PARENT else parent_id
    if new_parent == department_id:
        raise Conflict("A department cannot be its own parent")
    if new_parent and not any(d.id == new_parent for d in departments):
        raise NotFound("Parent department not found")
    if name and any(
        d.id != department_id and d.name == name and d.parent_id == new_parent
        for d in departments
    ):
        raise Conflict("Department name already exists")

    if name:
        dept.name = name
    if requires_approval is not None:
        dept.requires_approval = requires_approval
    dept.parent_id = new_parent

    await store.write_all(session, store.DEPARTMENTS, departments)

    # A new department default applies to every item: overrides are dropped
    # so the items inherit again.
    if requires_approval is not None:
        items = await store.read_all(session, store.ITEMS, EquipmentItem)
        reset = 0
        for item in items:
            if item.department_id == department_id and item.requires_approval is not None:
                item.requires_approval = None
                reset += 1
        if reset:
            await store.write_all(session, store.ITEMS, items)
            logger.info(f"Cleared approval override on {reset} items of '{dept.name}'")

    return _with_defaults(dept)


async def update_department_structure(
    session: AsyncSession,
    updates: Iterable[DepartmentStructureUpdate],
) -> list[Department]:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    by_id = {d.id: d for d in departments}

    changed = False
    for update in updates:
        dept = by_id.get(update.id)
        if dept is None:
            continue
        if dept.parent_id != update.parent_id or dept.order != update.order:
            dept.parent_id = update.parent_id
            dept.order = update.order
            changed = True

    if changed:
        await store.write_all(session, store.DEPARTMENTS, departments)
    return _sorted(_with_defaults(d) for d in departments)


async def delete_department(session: AsyncSession, department_id: str) -> dict:
    departments = await store.read_all(session, store.DEPARTMENTS, Department)
    remaining = [d for d in departments if d.id != department_id]
    if len(remaining) == len(departments):
        raise NotFound("Department not found")
    await store.write_all(session, store.DEPARTMENTS, remaining)

    # Cascade: the department's users and items (with their history) go too
    users = await store.read_all(session, store.USERS, User)
    await store.write_all(
        session, store.USERS, [u for u in users if u.department_id != department_id]
    )

    items = await store.read_all(session, store.ITEMS, EquipmentItem)
    await store.write_all(
        session, store.ITEMS, [i for i in items if i.department_id != department_id]
    )

    logger.warning(f"Department {department_id} deleted with its users and items")
    return {"message": "Department deleted"}
