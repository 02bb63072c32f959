"""Login and logout routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.database import get_db
from restopos.dependencies import get_bearer_token, get_current_account
from restopos.models import PosAccount
from restopos.routes.responses import ok
from restopos.schemas import AdminLoginRequest, PosAccountOut, PosLoginRequest, dump
from restopos.services import accounts, security

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post("/pos/login")
async def pos_login(payload: PosLoginRequest, db: AsyncSession = Depends(get_db)):
    """Restaurant login with mobile number and 8 digit PIN."""
    return ok(await accounts.pos_login(db, payload.mobile_number, payload.pin))


@router.post("/admin/login")
async def admin_login(payload: AdminLoginRequest, db: AsyncSession = Depends(get_db)):
    return ok(await accounts.admin_login(db, payload.username, payload.password))


@router.post("/logout")
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
):
    if token:
        await security.logout(db, token)
    return ok(message="Logged out")


@router.get("/me")
async def current_account(account: PosAccount = Depends(get_current_account)):
    """The logged-in restaurant with its license summary."""
    return ok({
        "account": dump(PosAccountOut, account),
        **accounts.license_summary(accounts.latest_subscription(account)),
    })
