"""Super-admin console routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.database import get_db
from restopos.dependencies import require_admin
from restopos.routes.responses import ok
from restopos.schemas import (
    AdminSettingUpdate,
    DigitalMenuActiveUpdate,
    LicenseExtension,
    PaymentMethodUpdate,
    PosAccountCreate,
)
from restopos.services import accounts, digital_menu, menu, orders, reports, settings_service

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


# =============================================================================
# ACCOUNTS
# =============================================================================

@router.get("/stats")
async def console_stats(db: AsyncSession = Depends(get_db)):
    return ok(await accounts.get_console_stats(db))


@router.get("/accounts")
async def list_accounts(
    search: Optional[str] = Query(None, description="Restaurant name or mobile number"),
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return ok(await accounts.search_pos_accounts(db, search, status_filter, limit, offset))


@router.get("/accounts/all")
async def all_accounts(db: AsyncSession = Depends(get_db)):
    """Every account, unpaginated."""
    return ok(await accounts.get_pos_accounts(db))


@router.post("/accounts", status_code=status.HTTP_201_CREATED)
async def create_account(payload: PosAccountCreate, db: AsyncSession = Depends(get_db)):
    account = await accounts.create_pos_account(db, **payload.model_dump())
    return ok(account, message="Account created")


@router.get("/accounts/{account_id}")
async def account_details(account_id: str, db: AsyncSession = Depends(get_db)):
    return ok(await accounts.get_account_full_details(db, account_id))


@router.post("/accounts/{account_id}/toggle-status")
async def toggle_status(account_id: str, db: AsyncSession = Depends(get_db)):
    return ok(await accounts.toggle_pos_account_status(db, account_id))


@router.post("/accounts/{account_id}/extend-license")
async def extend_license(account_id: str, payload: LicenseExtension, db: AsyncSession = Depends(get_db)):
    return ok(await accounts.extend_license(db, account_id, payload.days))


# =============================================================================
# PER-ACCOUNT DATA
# =============================================================================

@router.get("/accounts/{account_id}/menu")
async def account_menu(account_id: str, db: AsyncSession = Depends(get_db)):
    await accounts.load_account(db, account_id)
    return ok(await menu.get_account_menu(db, account_id))


@router.get("/accounts/{account_id}/orders")
async def account_orders(
    account_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    await accounts.load_account(db, account_id)
    return ok(await orders.get_account_orders(db, account_id, limit, offset))


@router.patch("/accounts/{account_id}/orders/{order_id}/payment-method")
async def change_payment_method(
    account_id: str,
    order_id: str,
    payload: PaymentMethodUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Admins may correct the payment method regardless of the edit policy."""
    order = await orders.update_order_payment_method(
        db, account_id, order_id, payload.payment_method, is_admin=True
    )
    return ok(order, message="Payment method updated")


@router.get("/accounts/{account_id}/analytics")
async def account_analytics(
    account_id: str,
    days: int = Query(30, ge=1, le=3650),
    db: AsyncSession = Depends(get_db),
):
    await accounts.load_account(db, account_id)
    return ok(await reports.get_account_analytics(db, account_id, days))


@router.get("/accounts/{account_id}/item-sales")
async def account_item_sales(
    account_id: str,
    days: int = Query(30, ge=1, le=3650),
    db: AsyncSession = Depends(get_db),
):
    await accounts.load_account(db, account_id)
    return ok(await reports.get_item_sales(db, account_id, days))


@router.put("/accounts/{account_id}/digital-menu/active")
async def account_menu_active(
    account_id: str,
    payload: DigitalMenuActiveUpdate,
    db: AsyncSession = Depends(get_db),
):
    return ok(await digital_menu.set_digital_menu_active(db, account_id, payload.is_active))


# =============================================================================
# GLOBAL SETTINGS
# =============================================================================

@router.get("/settings")
async def admin_settings(db: AsyncSession = Depends(get_db)):
    return ok(await settings_service.get_admin_settings(db))


@router.put("/settings")
async def update_admin_setting(payload: AdminSettingUpdate, db: AsyncSession = Depends(get_db)):
    """Upsert one setting, e.g. ``order_edit_mode`` with ``{"minutes": 30}``."""
    data = await settings_service.upsert_admin_setting(
        db, payload.setting_key, payload.setting_value, payload.setting_metadata
    )
    return ok(data, message="Setting saved")
