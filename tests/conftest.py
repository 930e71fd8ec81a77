import os
from datetime import timedelta

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must be set BEFORE importing equiptrack so the module-level engine
# never touches ./data; each test binds its own engine below.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["PUSH_GATEWAY_URL"] = ""

from equiptrack.core import database, store
from equiptrack.core.security import create_access_token, hash_password
from equiptrack.main import app
from equiptrack.models.common import utcnow
from equiptrack.models.enums import UserRole
from equiptrack.services import department_service, notification_service, user_service

# Hashed once; bcrypt is deliberately slow
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest_asyncio.fixture
async def db(monkeypatch, tmp_path):
    """
    A fresh database file per test. NullPool gives every session its own
    connection, so detached notification tasks never share a transaction
    with the code under test. The API dependency and the notification
    sessions both go through `database.AsyncSessionLocal`, so patching it
    covers every path.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'equiptrack.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(
        database,
        "AsyncSessionLocal",
        async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False),
    )
    await database.init_db()
    yield engine
    await notification_service.drain()
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db):
    async with database.AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


# ------------------------------------------------------------------
# Shared data
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def departments(db_session):
    tech = await department_service.add_department(db_session, "Technology", requires_approval=True)
    media = await department_service.add_department(db_session, "Media", requires_approval=True)
    return {"tech": tech, "media": media}


@pytest_asyncio.fixture
async def people(db_session, departments):
    tech_id = departments["tech"].id
    media_id = departments["media"].id

    async def make(name, role, department_id, code=None):
        return await user_service.create_user(
            db_session,
            name=name,
            contact=f"{name.lower()}-phone",
            role=role,
            department_id=department_id,
            password_hash=PASSWORD_HASH,
            invitation_code=code,
        )

    return {
        "root": await make("Root", UserRole.SuperAdmin, None, code="ROOT-CODE"),
        "tech_admin": await make("TechAdmin", UserRole.Admin, tech_id, code="TECH-CODE"),
        "media_admin": await make("MediaAdmin", UserRole.Admin, media_id),
        "tech_lead": await make("TechLead", UserRole.AdvancedUser, tech_id, code="LEAD-CODE"),
        "alice": await make("Alice", UserRole.RegularUser, tech_id),
        "bob": await make("Bob", UserRole.RegularUser, media_id),
    }


def auth_headers(user) -> dict:
    token = create_access_token(subject=user.id, data={"role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


def days_from_now(days: float):
    return utcnow() + timedelta(days=days)


async def read_collection(session, name, model):
    return await store.read_all(session, name, model)
