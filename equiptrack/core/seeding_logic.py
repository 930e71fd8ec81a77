from loguru import logger

from equiptrack.core import database, store
from equiptrack.core.config import settings
from equiptrack.models.category import Category
from equiptrack.models.department import Department
from equiptrack.models.enums import UserRole
from equiptrack.services.department_service import add_department
from equiptrack.services.category_service import add_category
from equiptrack.services.user_service import create_user, get_user_by_contact

# ----------------------------------------------------------------
# 1. DEFINE STATIC DATA
# ----------------------------------------------------------------

DEPARTMENTS_DATA = [
    {"name": "Technology", "requires_approval": True, "order": 0},
    {"name": "Media", "requires_approval": True, "order": 1},
    {"name": "Logistics", "requires_approval": False, "order": 2},
]

CATEGORIES_DATA = [
    {"name": "Camera", "color": "#4F46E5"},
    {"name": "Audio", "color": "#059669"},
    {"name": "Laptop", "color": "#D97706"},
    {"name": "Other", "color": "#999999"},
]

DEFAULT_SUPER_ADMIN_CONTACT = "admin"
DEFAULT_SUPER_ADMIN_PASSWORD = "admin123"


# ----------------------------------------------------------------
# 2. SEEDING STEPS
# ----------------------------------------------------------------
async def seed_departments(session) -> None:
    existing = await store.read_all(session, store.DEPARTMENTS, Department)
    if existing:
        logger.info("Departments already present. Skipping.")
        return
    for data in DEPARTMENTS_DATA:
        await add_department(session, **data)
    logger.success(f"Seeded {len(DEPARTMENTS_DATA)} departments.")


async def seed_categories(session) -> None:
    existing = await store.read_all(session, store.CATEGORIES, Category)
    if existing:
        logger.info("Categories already present. Skipping.")
        return
    for data in CATEGORIES_DATA:
        await add_category(session, **data)
    logger.success(f"Seeded {len(CATEGORIES_DATA)} categories.")


async def seed_super_admin(session) -> None:
    contact = settings.SUPER_ADMIN_CONTACT
    password = settings.SUPER_ADMIN_PASSWORD
    if not contact or not password:
        logger.warning(
            "Missing Super Admin credentials in settings, "
            f"falling back to '{DEFAULT_SUPER_ADMIN_CONTACT}'. Change its password."
        )
        contact = DEFAULT_SUPER_ADMIN_CONTACT
        password = DEFAULT_SUPER_ADMIN_PASSWORD

    if await get_user_by_contact(session, contact):
        logger.info("Super Admin already exists. Skipping.")
        return

    await create_user(
        session,
        name=settings.SUPER_ADMIN_NAME or "System Administrator",
        contact=contact,
        role=UserRole.SuperAdmin,
        password=password,
    )
    logger.success(f"Super Admin '{contact}' created successfully.")


async def seed_all() -> None:
    async with database.AsyncSessionLocal() as session:
        await seed_departments(session)
        await seed_categories(session)
        await seed_super_admin(session)
