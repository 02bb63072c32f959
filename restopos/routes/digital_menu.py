"""Digital menu management routes"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import NotFound
from restopos.database import get_db
from restopos.dependencies import get_current_account
from restopos.models import PosAccount
from restopos.routes.orders import restaurant_details
from restopos.routes.responses import attachment, ok
from restopos.schemas import DigitalMenuActiveUpdate, ThemeUpdate
from restopos.services import digital_menu, menu, pdf_reports, qr
from restopos.services.themes import get_theme_by_id, list_themes

router = APIRouter(prefix="/api/digital-menu", tags=["Digital Menu"])
logger = logging.getLogger(__name__)


def qr_options(
    width: int = Query(300),
    margin: int = Query(2),
    dark: str = Query("#000000"),
    light: str = Query("#FFFFFF"),
    error_correction: str = Query("M", pattern="^[LMQH]$"),
) -> qr.QROptions:
    return qr.QROptions(width=width, margin=margin, dark=dark, light=light, error_correction=error_correction)


async def _public_url(db: AsyncSession, account_id: str) -> str:
    current = await digital_menu.get_digital_menu_settings(db, account_id)
    if current["public_url"] is None:
        raise NotFound("Digital menu has not been set up")
    return current["public_url"]


@router.get("")
async def get_menu_settings(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await digital_menu.get_digital_menu_settings(db, account.id))


@router.post("/initialize")
async def initialize(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Create the public menu and its default theme (no-op when present)."""
    return ok(await digital_menu.initialize_digital_menu(db, account.id, account.restaurant_name))


@router.put("/active")
async def set_active(
    payload: DigitalMenuActiveUpdate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await digital_menu.set_digital_menu_active(db, account.id, payload.is_active))


@router.get("/themes")
async def themes():
    return ok(list_themes())


@router.put("/theme")
async def update_theme(
    payload: ThemeUpdate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await digital_menu.update_menu_theme(db, account.id, payload.theme_name, payload.custom_colors))


@router.get("/qr")
async def qr_data_url(
    options: qr.QROptions = Depends(qr_options),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """QR code as a PNG data URL, for embedding in the settings screen."""
    url = await _public_url(db, account.id)
    data_url = qr.generate_qr_data_url(url, options)
    await digital_menu.mark_qr_generated(db, account.id)
    return ok({"public_url": url, "data_url": data_url})


@router.get("/qr.png")
async def qr_png(
    options: qr.QROptions = Depends(qr_options),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """QR code of the public menu URL; marks the QR as generated."""
    url = await _public_url(db, account.id)
    content = qr.generate_qr_png(url, options)
    await digital_menu.mark_qr_generated(db, account.id)
    return attachment(content, "image/png", f"{digital_menu.slugify(account.restaurant_name)}-qr.png")


@router.get("/qr.svg")
async def qr_svg(
    options: qr.QROptions = Depends(qr_options),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    url = await _public_url(db, account.id)
    return Response(content=qr.generate_qr_svg(url, options), media_type="image/svg+xml")


@router.get("/menu.pdf")
async def menu_pdf(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Printable menu in the colours of the active theme."""
    current = await digital_menu.get_digital_menu_settings(db, account.id)
    selection = current["active_theme"] or {}
    theme = get_theme_by_id(selection.get("theme_name") or digital_menu.DEFAULT_THEME)

    content = pdf_reports.digital_menu_pdf(
        await menu.list_menu_items(db, account.id),
        await restaurant_details(db, account),
        theme,
        selection.get("custom_colors"),
    )
    return attachment(content, "application/pdf", pdf_reports.menu_filename(account.restaurant_name))
