import pytest

from equiptrack.core import store
from equiptrack.core.config import settings
from equiptrack.core.seeding_logic import CATEGORIES_DATA, DEPARTMENTS_DATA, seed_all
from equiptrack.core.security import verify_password
from equiptrack.models.enums import UserRole
from equiptrack.models.user import User
from equiptrack.services import category_service, department_service


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session, monkeypatch):
    monkeypatch.setattr(settings, "SUPER_ADMIN_CONTACT", "root-contact")
    monkeypatch.setattr(settings, "SUPER_ADMIN_PASSWORD", "root-pass")

    await seed_all()
    await seed_all()

    departments = await department_service.list_departments(db_session)
    assert len(departments) == len(DEPARTMENTS_DATA)
    assert len(await category_service.list_categories(db_session)) == len(CATEGORIES_DATA)

    [admin] = await store.read_all(db_session, store.USERS, User)
    assert admin.contact == "root-contact"
    assert admin.role == UserRole.SuperAdmin
    assert verify_password("root-pass", admin.password_hash)
