import pytest

from conftest import PASSWORD
from equiptrack.core.exceptions import Conflict, Forbidden, NotFound
from equiptrack.core.security import verify_password
from equiptrack.models.enums import UserRole, UserStatus
from equiptrack.schemas.user import UserCreate
from equiptrack.services import user_service


# ---------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_advanced_user_cannot_delete_admin(db_session, people):
    with pytest.raises(Forbidden):
        await user_service.delete_user(db_session, people["tech_lead"], people["tech_admin"].id)

    deleted = await user_service.delete_user(db_session, people["tech_lead"], people["alice"].id)
    assert deleted.id == people["alice"].id
    assert await user_service.get_user_by_id(db_session, people["alice"].id) is None


@pytest.mark.asyncio
async def test_peers_cannot_manage_each_other(db_session, people):
    with pytest.raises(Forbidden):
        await user_service.delete_user(db_session, people["tech_admin"], people["media_admin"].id)


@pytest.mark.asyncio
async def test_delete_unknown_user(db_session, people):
    with pytest.raises(NotFound):
        await user_service.delete_user(db_session, people["root"], "user_missing")


@pytest.mark.asyncio
async def test_cannot_create_same_or_higher_role(db_session, people):
    data = UserCreate(name="Eve", contact="eve", password="pw1234", role=UserRole.Admin)
    with pytest.raises(Forbidden):
        await user_service.add_user(db_session, people["tech_admin"], data)

    created = await user_service.add_user(db_session, people["root"], data)
    assert created.role == UserRole.Admin
    assert verify_password("pw1234", created.password_hash)


@pytest.mark.asyncio
async def test_cannot_promote_beyond_own_rank(db_session, people):
    with pytest.raises(Forbidden):
        await user_service.update_user(
            db_session, people["tech_admin"], people["alice"].id, {"role": UserRole.Admin}
        )

    updated = await user_service.update_user(
        db_session, people["tech_admin"], people["alice"].id, {"role": UserRole.AdvancedUser}
    )
    assert updated.role == UserRole.AdvancedUser


# ---------------------------------------------------------
# Uniqueness
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_duplicate_contact_conflicts(db_session, people):
    data = UserCreate(name="Alice 2", contact=people["alice"].contact, password="pw1234")
    with pytest.raises(Conflict):
        await user_service.add_user(db_session, people["root"], data)


@pytest.mark.asyncio
async def test_duplicate_invitation_code_conflicts(db_session, people):
    data = UserCreate(name="Lead 2", contact="lead2", password="pw1234", invitation_code="TECH-CODE")
    with pytest.raises(Conflict):
        await user_service.add_user(db_session, people["root"], data)


@pytest.mark.asyncio
async def test_update_uniqueness_excludes_self(db_session, people):
    alice = people["alice"]
    updated = await user_service.update_user(
        db_session, people["root"], alice.id, {"contact": alice.contact, "name": "Alice B"}
    )
    assert updated.name == "Alice B"

    with pytest.raises(Conflict):
        await user_service.update_user(
            db_session, people["root"], alice.id, {"contact": people["bob"].contact}
        )


@pytest.mark.asyncio
async def test_update_password_and_status(db_session, people):
    alice = people["alice"]
    updated = await user_service.update_user(
        db_session,
        people["tech_admin"],
        alice.id,
        {"password": "new-secret", "status": UserStatus.Banned},
    )
    assert updated.status == UserStatus.Banned
    assert verify_password("new-secret", updated.password_hash)
    assert not verify_password(PASSWORD, updated.password_hash)


@pytest.mark.asyncio
async def test_update_can_clear_department(db_session, people):
    updated = await user_service.update_user(
        db_session, people["root"], people["alice"].id, {"department_id": None}
    )
    assert updated.department_id is None


# ---------------------------------------------------------
# Listing
# ---------------------------------------------------------
@pytest.mark.asyncio
async def test_listing_scope(db_session, people, departments):
    tech_names = {u.name for u in await user_service.list_users(db_session, people["alice"])}
    assert tech_names == {"TechAdmin", "TechLead", "Alice"}

    everyone = await user_service.list_users(db_session, people["root"])
    assert len(everyone) == 6

    media = await user_service.list_users(db_session, people["root"], departments["media"].id)
    assert {u.name for u in media} == {"MediaAdmin", "Bob"}


@pytest.mark.asyncio
async def test_read_model_carries_department_name(db_session, people):
    [read] = await user_service.to_read(db_session, [people["alice"]])
    assert read.department_name == "Technology"
    assert not hasattr(read, "password_hash")
