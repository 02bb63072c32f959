"""Menu item and category routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.database import get_db
from restopos.dependencies import get_current_account
from restopos.models import PosAccount
from restopos.routes.responses import ok
from restopos.schemas import CategoriesUpdate, MenuItemUpsert
from restopos.services import menu

router = APIRouter(prefix="/api/menu", tags=["Menu"])


@router.get("/items")
async def list_items(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await menu.list_menu_items(db, account.id))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def upsert_item(
    payload: MenuItemUpsert,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Add a menu item, or update it when ``item_id`` is set."""
    return ok(await menu.upsert_menu_item(db, account.id, **payload.model_dump()))


@router.delete("/items/{item_id}")
async def delete_item(
    item_id: str,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await menu.delete_menu_item(db, account.id, item_id))


@router.get("/categories")
async def list_categories(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await menu.get_categories(db, account.id))


@router.put("/categories")
async def replace_categories(
    payload: CategoriesUpdate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await menu.upsert_categories(db, account.id, payload.categories))
