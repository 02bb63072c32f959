"""
Menu Service

Menu items and the ordered category list of an account.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import NotFound, ValidationFailed
from restopos.models import MenuItem, PosCategory
from restopos.schemas import MenuItemOut, dump

logger = logging.getLogger(__name__)


async def list_menu_items(db: AsyncSession, account_id: str) -> list[dict[str, Any]]:
    """Menu items of an account ordered by category, then name."""
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.pos_account_id == account_id)
        .order_by(MenuItem.category, MenuItem.name)
    )
    return [dump(MenuItemOut, item) for item in result.scalars().all()]


async def upsert_menu_item(
    db: AsyncSession,
    account_id: str,
    name: str,
    price: float,
    category: str,
    image: Optional[str] = None,
    item_id: Optional[str] = None,
) -> dict[str, Any]:
    """
    Insert a menu item, or update it when ``item_id`` is given.

    An update without an image keeps the current one. A category the
    account does not have yet is appended to its category list.
    """
    name = (name or "").strip()
    category = (category or "").strip()

    if not name:
        raise ValidationFailed("Item name is required")
    if not category:
        raise ValidationFailed("Category is required")
    if price is None or price <= 0:
        raise ValidationFailed("Price must be greater than 0")

    if item_id:
        result = await db.execute(
            select(MenuItem).where(MenuItem.id == item_id, MenuItem.pos_account_id == account_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFound("Menu item not found")
    else:
        item = MenuItem(pos_account_id=account_id)
        db.add(item)

    item.name = name
    item.price = round(float(price), 2)
    item.category = category
    if image:
        item.image = image

    await _ensure_category(db, account_id, category)
    await db.commit()

    logger.info(f"{'Updated' if item_id else 'Added'} menu item '{name}' for {account_id}")
    return dump(MenuItemOut, item)


async def delete_menu_item(db: AsyncSession, account_id: str, item_id: str) -> dict[str, Any]:
    result = await db.execute(
        delete(MenuItem).where(MenuItem.id == item_id, MenuItem.pos_account_id == account_id)
    )
    if not result.rowcount:
        raise NotFound("Menu item not found")
    await db.commit()

    logger.info(f"Deleted menu item {item_id} for {account_id}")
    return {"deleted_id": item_id}


# =============================================================================
# CATEGORIES
# =============================================================================

async def get_categories(db: AsyncSession, account_id: str) -> list[str]:
    result = await db.execute(
        select(PosCategory.name)
        .where(PosCategory.pos_account_id == account_id)
        .order_by(PosCategory.position, PosCategory.created_at)
    )
    return list(result.scalars().all())


def normalize_categories(categories: Iterable[str]) -> list[str]:
    """Trim names, drop blanks and duplicates, keep the first occurrence order."""
    seen = set()
    cleaned = []
    for raw in categories or []:
        name = (raw or "").strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


async def upsert_categories(db: AsyncSession, account_id: str, categories: Iterable[str]) -> list[str]:
    """Replace the category list of an account."""
    cleaned = normalize_categories(categories)
    if not cleaned:
        raise ValidationFailed("At least one category is required")

    await db.execute(delete(PosCategory).where(PosCategory.pos_account_id == account_id))
    for position, name in enumerate(cleaned):
        db.add(PosCategory(pos_account_id=account_id, name=name, position=position))
    await db.commit()

    logger.info(f"Saved {len(cleaned)} categories for {account_id}")
    return cleaned


async def _ensure_category(db: AsyncSession, account_id: str, name: str) -> None:
    existing = await db.execute(
        select(PosCategory.id).where(PosCategory.pos_account_id == account_id, PosCategory.name == name)
    )
    if existing.scalar_one_or_none() is not None:
        return

    last = await db.execute(
        select(func.max(PosCategory.position)).where(PosCategory.pos_account_id == account_id)
    )
    position = last.scalar()
    db.add(PosCategory(pos_account_id=account_id, name=name, position=0 if position is None else position + 1))


async def get_account_menu(db: AsyncSession, account_id: str) -> dict[str, Any]:
    """Menu items and categories of an account (super-admin view)."""
    return {
        "menu_items": await list_menu_items(db, account_id),
        "categories": await get_categories(db, account_id),
    }
