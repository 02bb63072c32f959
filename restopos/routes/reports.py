"""Analytics and sales report routes"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import ValidationFailed
from restopos.database import get_db
from restopos.dependencies import get_current_account
from restopos.models import PosAccount
from restopos.routes.orders import restaurant_details
from restopos.routes.responses import attachment, ok
from restopos.services import pdf_reports, reports

router = APIRouter(prefix="/api/reports", tags=["Reports"])

REPORT_KINDS = ("daily", "weekly", "monthly", "yearly", "payment-methods", "items", "quick-stats")


class ReportParams:
    """Query parameters shared by every report kind."""

    def __init__(
        self,
        day: Optional[date] = Query(None, alias="date", description="Day for daily/weekly reports"),
        month: Optional[int] = Query(None, ge=1, le=12),
        year: Optional[int] = Query(None, ge=2000, le=2100),
        start: Optional[date] = Query(None, description="Range start (inclusive)"),
        end: Optional[date] = Query(None, description="Range end (inclusive)"),
    ):
        self.day = day
        self.month = month
        self.year = year
        self.start = start
        self.end = end

    def as_kwargs(self) -> dict:
        return {
            "day": self.day,
            "month": self.month,
            "year": self.year,
            "start": self.start,
            "end": self.end,
        }


def _check_kind(kind: str) -> None:
    if kind not in REPORT_KINDS:
        raise ValidationFailed(f"Unknown report: {kind}. Options: {list(REPORT_KINDS)}")


@router.get("/analytics")
async def analytics(
    days: int = Query(30, ge=1, le=3650),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await reports.get_account_analytics(db, account.id, days))


@router.get("/item-sales")
async def item_sales(
    days: int = Query(30, ge=1, le=3650),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await reports.get_item_sales(db, account.id, days))


@router.get("/{kind}")
async def report(
    kind: str,
    params: ReportParams = Depends(),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """
    Sales report as JSON.

    ``kind`` is one of daily, weekly, monthly, yearly, payment-methods,
    items or quick-stats.
    """
    _check_kind(kind)
    return ok(await reports.build_report(db, account.id, kind, **params.as_kwargs()))


@router.get("/{kind}/pdf")
async def report_pdf(
    kind: str,
    params: ReportParams = Depends(),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Same report rendered as a downloadable PDF."""
    _check_kind(kind)
    renderer = pdf_reports.REPORT_RENDERERS.get(kind)
    if renderer is None:
        raise ValidationFailed(f"No PDF available for the {kind} report")

    data = await reports.build_report(db, account.id, kind, **params.as_kwargs())
    content = renderer(data, await restaurant_details(db, account))
    return attachment(content, "application/pdf", pdf_reports.report_filename(kind, data))
