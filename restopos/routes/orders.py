"""Billing and order history routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.timeutils import local_today, to_local
from restopos.database import get_db
from restopos.dependencies import get_current_account
from restopos.models import PosAccount
from restopos.routes.responses import attachment, ok
from restopos.schemas import OrderCreate, OrderOut, PaymentMethodUpdate, dump
from restopos.services import orders, pdf_reports, settings_service
from restopos.services.excel_manager import ExcelManager
from restopos.services.reports import order_record

router = APIRouter(prefix="/api/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def restaurant_details(db: AsyncSession, account: PosAccount) -> dict:
    """Settings used for receipt and report headers."""
    return await settings_service.get_pos_settings(db, account.id) or {
        "restaurant_name": account.restaurant_name,
        "tax_rate": 0.0,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Record a completed sale from the billing cart."""
    order = await orders.create_order(
        db,
        account.id,
        items=[line.model_dump() for line in payload.items],
        payment_method=payload.payment_method,
        order_number=payload.order_number,
        total_amount=payload.total_amount,
    )
    return ok(order, message=f"Order #{order['order_number']} saved")


@router.get("")
async def list_orders(
    limit: Optional[int] = Query(None, ge=1, le=500),
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await orders.get_orders(db, account.id, limit=limit))


@router.get("/export.xlsx")
async def export_orders(
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Order history workbook of the logged-in restaurant."""
    records = [order_record(o) for o in await orders.fetch_orders_between(db, account.id)]
    for record in records:
        record["created_at"] = to_local(record["created_at"])

    content = ExcelManager.orders_workbook(records)
    return attachment(content, XLSX_MEDIA_TYPE, f"orders-{local_today().isoformat()}.xlsx")


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(dump(OrderOut, await orders.get_order(db, account.id, order_id)))


@router.get("/{order_id}/can-edit")
async def can_edit(
    order_id: str,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return ok(await orders.can_edit_order(db, account.id, order_id))


@router.patch("/{order_id}/payment-method")
async def change_payment_method(
    order_id: str,
    payload: PaymentMethodUpdate,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    """Change the payment method while the edit policy allows it."""
    order = await orders.update_order_payment_method(db, account.id, order_id, payload.payment_method)
    return ok(order, message="Payment method updated")


@router.get("/{order_id}/receipt.pdf")
async def receipt(
    order_id: str,
    account: PosAccount = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    order = dump(OrderOut, await orders.get_order(db, account.id, order_id))
    content = pdf_reports.receipt_pdf(order, await restaurant_details(db, account))
    return attachment(content, "application/pdf", f"receipt-{order['order_number']}.pdf")
