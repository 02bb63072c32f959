"""
Order Service

Records sales from the billing screen, lists order history and applies
the admin's order edit policy to payment method changes.

Totals are always recomputed from the lines; a client-supplied total is
only accepted when it agrees with them.
"""

import logging
import math
from typing import Any, Iterable, Optional

from kombu.exceptions import OperationalError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restopos.core.config import get_settings
from restopos.core.exceptions import Conflict, NotFound, PermissionDenied, ValidationFailed
from restopos.core.timeutils import as_utc, local_today, utcnow
from restopos.models import Order, OrderItem, PaymentMethod, PosAccount, PosTelemetry
from restopos.schemas import OrderOut, dump
from restopos.services.settings_service import get_order_edit_policy

settings = get_settings()
logger = logging.getLogger(__name__)

TOTAL_TOLERANCE = 0.01


# =============================================================================
# HELPERS
# =============================================================================

def normalize_payment_method(value: Optional[str]) -> PaymentMethod:
    """Map ``Cash``/``UPI``/``card`` etc. onto a ``PaymentMethod``."""
    try:
        return PaymentMethod((value or "").strip().lower())
    except ValueError:
        valid = [m.value for m in PaymentMethod]
        raise ValidationFailed(f"Invalid payment method. Options: {valid}")


def build_order_lines(items: Iterable[Any]) -> list[dict[str, Any]]:
    """
    Validate cart lines and price them.

    Accepts dicts or objects with ``name``, ``price`` and ``quantity``.
    """
    lines = []
    for raw in items or []:
        get = raw.get if isinstance(raw, dict) else lambda key, default=None: getattr(raw, key, default)
        name = (get("name") or "").strip()
        price = get("price")
        quantity = get("quantity")

        if not name:
            raise ValidationFailed("Every order line needs an item name")
        if price is None or float(price) < 0:
            raise ValidationFailed(f"Invalid price for {name}")
        if quantity is None or int(quantity) < 1:
            raise ValidationFailed(f"Invalid quantity for {name}")

        unit_price = round(float(price), 2)
        quantity = int(quantity)
        lines.append({
            "item_name": name,
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": round(unit_price * quantity, 2),
        })

    if not lines:
        raise ValidationFailed("Cart is empty")
    return lines


async def next_order_number(db: AsyncSession, account_id: str) -> str:
    """``YYYYMMDD-NNNN``: the account's next sequence number for today."""
    prefix = local_today().strftime("%Y%m%d")
    result = await db.execute(
        select(Order.order_number).where(
            Order.pos_account_id == account_id,
            Order.order_number.like(f"{prefix}-%"),
        )
    )
    highest = 0
    for number in result.scalars().all():
        suffix = number.rsplit("-", 1)[-1]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1:04d}"


def _export_payload(order: Order, restaurant_name: str) -> dict[str, Any]:
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "pos_account_id": order.pos_account_id,
        "restaurant_name": restaurant_name,
        "created_at": as_utc(order.created_at).isoformat(),
        "payment_method": order.payment_method.value,
        "items": ", ".join(f"{i.quantity}x {i.item_name}" for i in order.items),
        "item_count": sum(i.quantity for i in order.items),
        "total_amount": order.total_amount,
    }


def _queue_export(payload: dict[str, Any]) -> None:
    # Imported here so the worker module does not import the service layer back
    from restopos.tasks import export_order_to_excel

    try:
        export_order_to_excel.delay(payload)
    except OperationalError:
        logger.exception(f"Could not queue Excel export for order {payload['order_number']}")


# =============================================================================
# ORDERS
# =============================================================================

async def create_order(
    db: AsyncSession,
    account_id: str,
    items: Iterable[Any],
    payment_method: str,
    order_number: Optional[str] = None,
    total_amount: Optional[float] = None,
) -> dict[str, Any]:
    """
    Record a completed sale and update the account telemetry.

    Raises:
        ValidationFailed: empty cart, bad lines, unknown payment method,
            or a client total that disagrees with the lines
        Conflict: the order number is already used by this account
    """
    lines = build_order_lines(items)
    method = normalize_payment_method(payment_method)
    total = round(sum(line["total_price"] for line in lines), 2)

    if total_amount is not None and abs(float(total_amount) - total) > TOTAL_TOLERANCE:
        raise ValidationFailed(
            f"Order total {float(total_amount):.2f} does not match items total {total:.2f}"
        )

    account = await db.get(PosAccount, account_id)
    if account is None:
        raise NotFound("Account not found")

    order_number = (order_number or "").strip() or await next_order_number(db, account_id)

    # Looked up before the order is added so autoflush cannot raise the duplicate here
    result = await db.execute(select(PosTelemetry).where(PosTelemetry.pos_account_id == account_id))
    telemetry = result.scalar_one_or_none()
    if telemetry is None:
        telemetry = PosTelemetry(pos_account_id=account_id, total_orders=0, total_revenue=0.0)
        db.add(telemetry)
    telemetry.total_orders = (telemetry.total_orders or 0) + 1
    telemetry.total_revenue = round((telemetry.total_revenue or 0.0) + total, 2)
    telemetry.last_active = utcnow()

    order = Order(
        pos_account_id=account_id,
        order_number=order_number,
        payment_method=method,
        total_amount=total,
        created_at=utcnow(),
        items=[OrderItem(position=i, **line) for i, line in enumerate(lines)],
    )
    db.add(order)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Order number {order_number} already exists")

    logger.info(
        f"Order #{order_number} recorded for {account.restaurant_name}: "
        f"{method.value} {total:.2f}"
    )

    if settings.order_export_enabled:
        _queue_export(_export_payload(order, account.restaurant_name))

    return dump(OrderOut, order)


async def _load_order(db: AsyncSession, account_id: str, order_id: str) -> Order:
    result = await db.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.id == order_id, Order.pos_account_id == account_id)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    return order


async def get_orders(db: AsyncSession, account_id: str, limit: Optional[int] = None) -> list[dict[str, Any]]:
    """Newest orders of an account with their lines."""
    limit = limit or settings.orders_page_limit
    result = await db.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.pos_account_id == account_id)
        .order_by(Order.created_at.desc())
        .limit(limit)
    )
    return [dump(OrderOut, o) for o in result.scalars().all()]


async def get_account_orders(
    db: AsyncSession, account_id: str, limit: int = 50, offset: int = 0
) -> dict[str, Any]:
    """Paginated order history for the super-admin console."""
    total_count = (
        await db.execute(select(func.count(Order.id)).where(Order.pos_account_id == account_id))
    ).scalar() or 0

    result = await db.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.pos_account_id == account_id)
        .order_by(Order.created_at.desc())
        .offset(max(offset, 0))
        .limit(max(limit, 1))
    )
    return {
        "orders": [dump(OrderOut, o) for o in result.scalars().all()],
        "total_count": total_count,
    }


async def fetch_orders_between(db: AsyncSession, account_id: str, start=None, end=None) -> list[Order]:
    """ORM orders (lines loaded) with ``start <= created_at < end``, oldest first."""
    query = (
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.pos_account_id == account_id)
        .order_by(Order.created_at)
    )
    if start is not None:
        query = query.where(Order.created_at >= start)
    if end is not None:
        query = query.where(Order.created_at < end)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_order(db: AsyncSession, account_id: str, order_id: str) -> Order:
    return await _load_order(db, account_id, order_id)


# =============================================================================
# ORDER EDITING
# =============================================================================

def evaluate_edit_window(policy: dict[str, Any], created_at) -> dict[str, Any]:
    """Apply an order edit policy to an order created at ``created_at``."""
    mode = policy["mode"]

    if mode == "off":
        return {
            "can_edit": False,
            "message": "Order editing is disabled by the administrator",
            "minutes_remaining": 0,
        }
    if mode == "unlimited":
        return {"can_edit": True, "message": "Order can be edited", "minutes_remaining": None}

    limit = policy["minutes"]
    elapsed = (utcnow() - as_utc(created_at)).total_seconds() / 60
    if elapsed <= limit:
        remaining = max(0, math.ceil(limit - elapsed))
        return {
            "can_edit": True,
            "message": f"Order can be edited for {remaining} more minute(s)",
            "minutes_remaining": remaining,
        }
    return {
        "can_edit": False,
        "message": f"Orders can only be edited within {limit} minutes of creation",
        "minutes_remaining": 0,
    }


async def can_edit_order(db: AsyncSession, account_id: str, order_id: str) -> dict[str, Any]:
    order = await _load_order(db, account_id, order_id)
    policy = await get_order_edit_policy(db)
    return evaluate_edit_window(policy, order.created_at)


async def update_order_payment_method(
    db: AsyncSession,
    account_id: str,
    order_id: str,
    payment_method: str,
    is_admin: bool = False,
) -> dict[str, Any]:
    """Change the payment method; admins are not bound by the edit policy."""
    method = normalize_payment_method(payment_method)
    order = await _load_order(db, account_id, order_id)

    if not is_admin:
        verdict = evaluate_edit_window(await get_order_edit_policy(db), order.created_at)
        if not verdict["can_edit"]:
            raise PermissionDenied(verdict["message"])

    previous = order.payment_method
    order.payment_method = method
    await db.commit()

    logger.info(
        f"Order #{order.order_number} payment method {previous.value} -> {method.value}"
        f"{' (admin)' if is_admin else ''}"
    )
    return dump(OrderOut, order)
