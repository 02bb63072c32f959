"""
Sales Analytics and Reports

Orders are flattened into pandas frames with timestamps already moved to
the report timezone, then bucketed by day, week (Sunday start), month,
year or an inclusive date range. The pure ``*_report`` functions work on
order records and feed both the JSON API and the PDF renderers.

Order record shape::

    {
        "order_number": "20240115-0001",
        "created_at": datetime (aware),
        "payment_method": "cash",
        "total_amount": 180.0,
        "items": [{"item_name": "Dosa", "quantity": 2, "total_price": 180.0}],
    }
"""

import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, Optional

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import ValidationFailed
from restopos.core.timeutils import local_today, report_zone, to_local, utcnow
from restopos.models import Order
from restopos.services.orders import fetch_orders_between

logger = logging.getLogger(__name__)

ORDER_COLUMNS = ["order_number", "created_at", "date", "payment_method", "total_amount", "item_count"]
ITEM_COLUMNS = ["order_number", "date", "item_name", "quantity", "revenue"]
PAYMENT_METHODS = ("cash", "upi", "card")


# =============================================================================
# RECORDS & FRAMES
# =============================================================================

def order_record(order: Order) -> dict[str, Any]:
    """Flatten an ORM order (lines loaded) into an order record."""
    return {
        "order_number": order.order_number,
        "created_at": order.created_at,
        "payment_method": order.payment_method.value,
        "total_amount": float(order.total_amount),
        "items": [
            {"item_name": i.item_name, "quantity": i.quantity, "total_price": float(i.total_price)}
            for i in order.items
        ],
    }


def orders_frame(records: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """One row per order; ``created_at`` local, ``date`` its calendar day."""
    rows = []
    for r in records:
        local = to_local(r["created_at"])
        rows.append({
            "order_number": r["order_number"],
            "created_at": local,
            "date": local.date(),
            "payment_method": str(r["payment_method"]).lower(),
            "total_amount": float(r["total_amount"]),
            "item_count": sum(int(i["quantity"]) for i in r.get("items", [])),
        })
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def items_frame(records: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """One row per order line."""
    rows = []
    for r in records:
        day = to_local(r["created_at"]).date()
        for item in r.get("items", []):
            rows.append({
                "order_number": r["order_number"],
                "date": day,
                "item_name": item["item_name"],
                "quantity": int(item["quantity"]),
                "revenue": float(item["total_price"]),
            })
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def _between(frame: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    """Rows whose ``date`` falls in ``[start, end]``."""
    if frame.empty:
        return frame
    return frame[(frame["date"] >= start) & (frame["date"] <= end)]


def _summary(frame: pd.DataFrame) -> dict[str, Any]:
    total_orders = int(len(frame))
    total_revenue = round(float(frame["total_amount"].sum()), 2) if total_orders else 0.0
    return {
        "total_orders": total_orders,
        "total_revenue": total_revenue,
        "average_order_value": round(total_revenue / total_orders, 2) if total_orders else 0.0,
    }


def _payment_breakdown(frame: pd.DataFrame) -> list[dict[str, Any]]:
    if frame.empty:
        return []
    grouped = frame.groupby("payment_method")["total_amount"].agg(["count", "sum"])
    total = float(frame["total_amount"].sum())
    rows = []
    for method, row in grouped.iterrows():
        revenue = round(float(row["sum"]), 2)
        rows.append({
            "payment_method": method,
            "orders": int(row["count"]),
            "revenue": revenue,
            "share": round(revenue / total * 100, 1) if total else 0.0,
        })
    return sorted(rows, key=lambda r: r["revenue"], reverse=True)


def _item_breakdown(items: pd.DataFrame, limit: Optional[int] = None) -> list[dict[str, Any]]:
    if items.empty:
        return []
    grouped = (
        items.groupby("item_name")
        .agg(quantity_sold=("quantity", "sum"), revenue=("revenue", "sum"), orders=("order_number", "nunique"))
        .sort_values(["revenue", "quantity_sold"], ascending=False)
    )
    if limit:
        grouped = grouped.head(limit)
    return [
        {
            "item_name": name,
            "quantity_sold": int(row["quantity_sold"]),
            "revenue": round(float(row["revenue"]), 2),
            "orders": int(row["orders"]),
        }
        for name, row in grouped.iterrows()
    ]


def _per_day(frame: pd.DataFrame, days: Iterable[date]) -> list[dict[str, Any]]:
    totals = {}
    if not frame.empty:
        grouped = frame.groupby("date")["total_amount"].agg(["count", "sum"])
        totals = {d: (int(r["count"]), round(float(r["sum"]), 2)) for d, r in grouped.iterrows()}
    return [
        {"date": d.isoformat(), "orders": totals.get(d, (0, 0.0))[0], "revenue": totals.get(d, (0, 0.0))[1]}
        for d in days
    ]


# =============================================================================
# REPORTS
# =============================================================================

def week_bounds(day: date) -> tuple[date, date]:
    """Sunday-to-Saturday week containing ``day``."""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def daily_report(records: Iterable[dict[str, Any]], day: date) -> dict[str, Any]:
    frame = _between(orders_frame(records), day, day)
    orders = [
        {
            "order_number": row.order_number,
            "time": row.created_at.strftime("%H:%M:%S"),
            "items": int(row.item_count),
            "payment_method": row.payment_method,
            "total_amount": round(float(row.total_amount), 2),
        }
        for row in frame.sort_values("created_at").itertuples()
    ] if not frame.empty else []

    return {
        "period": "daily",
        "date": day.isoformat(),
        **_summary(frame),
        "payment_breakdown": _payment_breakdown(frame),
        "orders": orders,
    }


def weekly_report(records: Iterable[dict[str, Any]], day: date) -> dict[str, Any]:
    start, end = week_bounds(day)
    frame = _between(orders_frame(records), start, end)
    return {
        "period": "weekly",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        **_summary(frame),
        "payment_breakdown": _payment_breakdown(frame),
        "daily": _per_day(frame, (start + timedelta(days=i) for i in range(7))),
    }


def monthly_report(records: Iterable[dict[str, Any]], month: int, year: int) -> dict[str, Any]:
    """Month summary with a row for every day that had orders."""
    if not 1 <= month <= 12:
        raise ValidationFailed("Month must be between 1 and 12")

    start = date(year, month, 1)
    end = date(year, month, calendar.monthrange(year, month)[1])
    frame = _between(orders_frame(records), start, end)
    days = sorted(frame["date"].unique()) if not frame.empty else []

    return {
        "period": "monthly",
        "month": month,
        "year": year,
        "month_name": calendar.month_name[month],
        **_summary(frame),
        "payment_breakdown": _payment_breakdown(frame),
        "daily": _per_day(frame, days),
    }


def yearly_report(records: Iterable[dict[str, Any]], year: int) -> dict[str, Any]:
    """Year summary with all twelve months."""
    frame = _between(orders_frame(records), date(year, 1, 1), date(year, 12, 31))

    by_month = {}
    if not frame.empty:
        months = frame["date"].map(lambda d: d.month)
        grouped = frame.groupby(months)["total_amount"].agg(["count", "sum"])
        by_month = {int(m): (int(r["count"]), round(float(r["sum"]), 2)) for m, r in grouped.iterrows()}

    return {
        "period": "yearly",
        "year": year,
        **_summary(frame),
        "payment_breakdown": _payment_breakdown(frame),
        "monthly": [
            {
                "month": m,
                "month_name": calendar.month_name[m],
                "orders": by_month.get(m, (0, 0.0))[0],
                "revenue": by_month.get(m, (0, 0.0))[1],
            }
            for m in range(1, 13)
        ],
    }


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationFailed("End date must not be before start date")


def payment_method_report(records: Iterable[dict[str, Any]], start: date, end: date) -> dict[str, Any]:
    """Revenue per payment method, both end days included."""
    _check_range(start, end)
    frame = _between(orders_frame(records), start, end)
    return {
        "period": "range",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        **_summary(frame),
        "payment_breakdown": _payment_breakdown(frame),
    }


def item_wise_report(records: Iterable[dict[str, Any]], start: date, end: date) -> dict[str, Any]:
    """Quantity and revenue per item, both end days included."""
    _check_range(start, end)
    records = list(records)
    frame = _between(orders_frame(records), start, end)
    items = _between(items_frame(records), start, end)
    return {
        "period": "range",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        **_summary(frame),
        "items": _item_breakdown(items),
    }


def quick_stats(records: Iterable[dict[str, Any]], today: date) -> dict[str, Any]:
    """Revenue cards and chart inputs for the reports screen."""
    frame = orders_frame(records)
    week_start, _ = week_bounds(today)

    def card(start: date) -> dict[str, Any]:
        part = _between(frame, start, today)
        return {
            "revenue": round(float(part["total_amount"].sum()), 2) if not part.empty else 0.0,
            "orders": int(len(part)),
        }

    last_7 = [today - timedelta(days=i) for i in range(6, -1, -1)]
    series = _per_day(_between(frame, last_7[0], today), last_7)
    for point, day in zip(series, last_7):
        point["label"] = f"{calendar.month_abbr[day.month]} {day.day}"

    methods = {m: 0.0 for m in PAYMENT_METHODS}
    if not frame.empty:
        for method, value in frame.groupby("payment_method")["total_amount"].sum().items():
            methods[method] = round(float(value), 2)

    return {
        "today": card(today),
        "this_week": card(week_start),
        "this_month": card(today.replace(day=1)),
        "this_year": card(date(today.year, 1, 1)),
        "payment_methods": [{"method": m, "value": v} for m, v in methods.items()],
        "last_7_days": series,
        "average_order_value": _summary(frame)["average_order_value"],
    }


# =============================================================================
# DATABASE-BACKED ENTRY POINTS
# =============================================================================

def local_day_start(day: date) -> datetime:
    """Midnight of ``day`` in the report timezone, as UTC."""
    return datetime.combine(day, time.min, tzinfo=report_zone()).astimezone(timezone.utc)


async def load_records(
    db: AsyncSession, account_id: str, start: Optional[date] = None, end: Optional[date] = None
) -> list[dict[str, Any]]:
    """Order records whose local day lies in ``[start, end]``."""
    orders = await fetch_orders_between(
        db,
        account_id,
        start=local_day_start(start) if start else None,
        end=local_day_start(end + timedelta(days=1)) if end else None,
    )
    return [order_record(o) for o in orders]


async def get_account_analytics(db: AsyncSession, account_id: str, days: int = 30) -> dict[str, Any]:
    """
    Summary, daily revenue and top 10 items over the last ``days`` days.
    """
    if days < 1:
        raise ValidationFailed("Days must be at least 1")

    since = utcnow() - timedelta(days=days)
    records = [order_record(o) for o in await fetch_orders_between(db, account_id, start=since)]
    frame = orders_frame(records)
    items = items_frame(records)

    summary = _summary(frame)
    summary["unique_items_sold"] = int(items["item_name"].nunique()) if not items.empty else 0

    days_with_orders = sorted(frame["date"].unique()) if not frame.empty else []
    return {
        "period_days": days,
        "summary": summary,
        "daily_revenue": _per_day(frame, days_with_orders),
        "top_items": [
            {k: row[k] for k in ("item_name", "quantity_sold", "revenue")}
            for row in _item_breakdown(items, limit=10)
        ],
    }


async def get_item_sales(db: AsyncSession, account_id: str, days: int = 30) -> list[dict[str, Any]]:
    """Every item sold in the last ``days`` days, best sellers first."""
    if days < 1:
        raise ValidationFailed("Days must be at least 1")
    since = utcnow() - timedelta(days=days)
    records = [order_record(o) for o in await fetch_orders_between(db, account_id, start=since)]
    return _item_breakdown(items_frame(records))


async def build_report(db: AsyncSession, account_id: str, kind: str, **params) -> dict[str, Any]:
    """Fetch the orders a report needs and run it."""
    if kind == "daily":
        day = params.get("day") or local_today()
        return daily_report(await load_records(db, account_id, day, day), day)

    if kind == "weekly":
        start, end = week_bounds(params.get("day") or local_today())
        return weekly_report(await load_records(db, account_id, start, end), start)

    if kind == "monthly":
        today = local_today()
        month = params.get("month") or today.month
        year = params.get("year") or today.year
        if not 1 <= month <= 12:
            raise ValidationFailed("Month must be between 1 and 12")
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        return monthly_report(await load_records(db, account_id, start, end), month, year)

    if kind == "yearly":
        year = params.get("year") or local_today().year
        records = await load_records(db, account_id, date(year, 1, 1), date(year, 12, 31))
        return yearly_report(records, year)

    if kind in ("payment-methods", "items"):
        start = params.get("start") or local_today()
        end = params.get("end") or start
        _check_range(start, end)
        records = await load_records(db, account_id, start, end)
        if kind == "items":
            return item_wise_report(records, start, end)
        return payment_method_report(records, start, end)

    if kind == "quick-stats":
        return quick_stats(await load_records(db, account_id), local_today())

    raise ValidationFailed(f"Unknown report: {kind}")
