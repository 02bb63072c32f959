"""Public digital menu: the themed HTML page and its JSON feed"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import NotFound
from restopos.database import get_db
from restopos.routes.responses import ok
from restopos.services import digital_menu

router = APIRouter(tags=["Public Menu"])
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.get("/menu/{slug}", response_class=HTMLResponse)
async def public_menu_page(
    request: Request,
    slug: str,
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Customer-facing menu; unknown or switched-off menus get a 404 page."""
    try:
        data = await digital_menu.get_public_menu(db, slug)
    except NotFound as exc:
        logger.info(f"Public menu /menu/{slug} unavailable: {exc.message}")
        return templates.TemplateResponse(
            request,
            "menu_not_found.html",
            {"message": exc.message},
            status_code=status.HTTP_404_NOT_FOUND,
        )

    page = digital_menu.build_public_menu_page(data, search=search, category=category)
    return templates.TemplateResponse(request, "public_menu.html", {"page": page, "slug": slug})


@router.get("/api/public/menu/{slug}")
async def public_menu_data(slug: str, db: AsyncSession = Depends(get_db)):
    return ok(await digital_menu.get_public_menu(db, slug))
