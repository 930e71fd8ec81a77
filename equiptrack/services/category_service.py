from sqlalchemy.ext.asyncio import AsyncSession

from equiptrack.core import store
from equiptrack.core.exceptions import NotFound
from equiptrack.models.category import Category


async def list_categories(session: AsyncSession) -> list[Category]:
    return await store.read_all(session, store.CATEGORIES, Category)


async def add_category(session: AsyncSession, name: str, color: str) -> Category:
    categories = await store.read_all(session, store.CATEGORIES, Category)
    category = Category(id=store.generate_id("cat"), name=name, color=color)
    categories.append(category)
    await store.write_all(session, store.CATEGORIES, categories)
    return category


async def delete_category(session: AsyncSession, category_id: str) -> dict:
    categories = await store.read_all(session, store.CATEGORIES, Category)
    remaining = [c for c in categories if c.id != category_id]
    if len(remaining) == len(categories):
        raise NotFound("Category not found")
    await store.write_all(session, store.CATEGORIES, remaining)
    return {"message": "Category deleted"}
