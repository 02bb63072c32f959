"""Restaurant settings routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.database import get_db
from restopos.dependencies import get_current_account
from restopos.models import PosAccount
from restopos.routes.responses import ok
from restopos.schemas import PosSettingsUpdate
from restopos.services import settings_service

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("")
async def get_settings(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await settings_service.get_pos_settings(db, account.id))


@router.put("")
async def update_settings(
    payload: PosSettingsUpdate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Replace the restaurant details shown on receipts and the menu."""
    data = await settings_service.upsert_pos_settings(db, account.id, **payload.model_dump())
    return ok(data, message="Settings saved")


@router.get("/order-edit-policy")
async def order_edit_policy(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await settings_service.get_order_edit_policy(db))
