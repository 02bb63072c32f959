"""Sales reports: pure aggregation functions and the report endpoints."""

from datetime import date, datetime, timezone

import pytest

from sqlalchemy import update

from conftest import place_order, sync_engine
from restopos.core.config import get_settings
from restopos.core.exceptions import ValidationFailed
from restopos.models import Order
from restopos.services import reports


def record(number, when, total, method="cash", items=None):
    return {
        "order_number": number,
        "created_at": when,
        "payment_method": method,
        "total_amount": total,
        "items": items or [{"item_name": "Thali", "quantity": 1, "total_price": total}],
    }


def at(*args):
    return datetime(*args, tzinfo=timezone.utc)


RECORDS = [
    record("A1", at(2024, 1, 14, 23, 30), 100.0, "cash"),               # Sunday
    record("A2", at(2024, 1, 15, 9, 0), 250.0, "upi",
           [{"item_name": "Dosa", "quantity": 2, "total_price": 180.0},
            {"item_name": "Coffee", "quantity": 2, "total_price": 70.0}]),
    record("A3", at(2024, 1, 15, 13, 15), 150.0, "cash"),
    record("A4", at(2024, 1, 20, 20, 0), 80.0, "card"),                 # Saturday
    record("A5", at(2024, 1, 21, 8, 0), 60.0, "cash"),                  # next Sunday
    record("A6", at(2024, 3, 2, 12, 0), 500.0, "upi"),
]


def test_daily_report():
    report = reports.daily_report(RECORDS, date(2024, 1, 15))

    assert report["total_orders"] == 2
    assert report["total_revenue"] == 400.0
    assert report["average_order_value"] == 200.0
    assert [o["order_number"] for o in report["orders"]] == ["A2", "A3"]
    assert report["orders"][0]["items"] == 4
    assert {p["payment_method"]: p["revenue"] for p in report["payment_breakdown"]} == {"upi": 250.0, "cash": 150.0}


def test_daily_report_without_orders():
    report = reports.daily_report(RECORDS, date(2024, 2, 1))

    assert report["total_orders"] == 0
    assert report["total_revenue"] == 0.0
    assert report["average_order_value"] == 0.0
    assert report["orders"] == []
    assert report["payment_breakdown"] == []


def test_week_starts_on_sunday():
    assert reports.week_bounds(date(2024, 1, 17)) == (date(2024, 1, 14), date(2024, 1, 20))
    assert reports.week_bounds(date(2024, 1, 14)) == (date(2024, 1, 14), date(2024, 1, 20))


def test_weekly_report():
    report = reports.weekly_report(RECORDS, date(2024, 1, 17))

    assert report["start_date"] == "2024-01-14"
    assert report["end_date"] == "2024-01-20"
    assert report["total_orders"] == 4
    assert report["total_revenue"] == 580.0
    assert len(report["daily"]) == 7
    assert report["daily"][1] == {"date": "2024-01-15", "orders": 2, "revenue": 400.0}
    assert report["daily"][2]["orders"] == 0


def test_monthly_report_lists_only_days_with_orders():
    report = reports.monthly_report(RECORDS, 1, 2024)

    assert report["month_name"] == "January"
    assert report["total_orders"] == 5
    assert [d["date"] for d in report["daily"]] == ["2024-01-14", "2024-01-15", "2024-01-20", "2024-01-21"]


def test_monthly_report_rejects_bad_month():
    with pytest.raises(ValidationFailed):
        reports.monthly_report(RECORDS, 13, 2024)


def test_yearly_report_has_twelve_months():
    report = reports.yearly_report(RECORDS, 2024)

    assert len(report["monthly"]) == 12
    assert report["monthly"][0]["orders"] == 5
    assert report["monthly"][1] == {"month": 2, "month_name": "February", "orders": 0, "revenue": 0.0}
    assert report["monthly"][2]["revenue"] == 500.0
    assert report["total_revenue"] == 1140.0


def test_range_reports_include_both_ends():
    payments = reports.payment_method_report(RECORDS, date(2024, 1, 15), date(2024, 1, 20))

    assert payments["total_orders"] == 3
    shares = {p["payment_method"]: p["share"] for p in payments["payment_breakdown"]}
    assert shares == {"upi": 52.1, "cash": 31.2, "card": 16.7}


def test_item_wise_report():
    report = reports.item_wise_report(RECORDS, date(2024, 1, 15), date(2024, 1, 15))

    assert report["items"] == [
        {"item_name": "Dosa", "quantity_sold": 2, "revenue": 180.0, "orders": 1},
        {"item_name": "Thali", "quantity_sold": 1, "revenue": 150.0, "orders": 1},
        {"item_name": "Coffee", "quantity_sold": 2, "revenue": 70.0, "orders": 1},
    ]


def test_range_end_before_start():
    with pytest.raises(ValidationFailed) as exc:
        reports.item_wise_report(RECORDS, date(2024, 1, 20), date(2024, 1, 15))

    assert exc.value.message == "End date must not be before start date"


def test_quick_stats():
    stats = reports.quick_stats(RECORDS, date(2024, 1, 21))

    assert stats["today"] == {"revenue": 60.0, "orders": 1}
    assert stats["this_week"] == {"revenue": 60.0, "orders": 1}
    assert stats["this_month"] == {"revenue": 640.0, "orders": 5}
    assert [p["method"] for p in stats["payment_methods"]] == ["cash", "upi", "card"]
    assert len(stats["last_7_days"]) == 7
    assert stats["last_7_days"][-1]["label"] == "Jan 21"


# =============================================================================
# API
# =============================================================================

def test_daily_report_endpoint(client, pos_headers):
    place_order(client, pos_headers)
    place_order(client, pos_headers, payment_method="upi", items=[{"name": "Tea", "price": 20, "quantity": 2}])

    data = client.get("/api/reports/daily", headers=pos_headers).json()["data"]

    assert data["total_orders"] == 2
    assert data["total_revenue"] == 250.0
    assert data["average_order_value"] == 125.0


def test_items_report_endpoint(client, pos_headers):
    place_order(client, pos_headers)

    data = client.get("/api/reports/items", headers=pos_headers).json()["data"]

    assert [i["item_name"] for i in data["items"]] == ["Masala Dosa", "Filter Coffee"]


def test_unknown_report_kind(client, pos_headers):
    response = client.get("/api/reports/hourly", headers=pos_headers)

    assert response.status_code == 400


def test_report_pdf(client, pos_headers):
    place_order(client, pos_headers)

    response = client.get("/api/reports/monthly/pdf", headers=pos_headers)

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


def test_quick_stats_has_no_pdf(client, pos_headers):
    response = client.get("/api/reports/quick-stats/pdf", headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "No PDF available for the quick-stats report"


def test_analytics(client, pos_headers):
    place_order(client, pos_headers)

    data = client.get("/api/reports/analytics", params={"days": 7}, headers=pos_headers).json()["data"]

    assert data["summary"]["total_orders"] == 1
    assert data["summary"]["unique_items_sold"] == 2
    assert data["top_items"][0] == {"item_name": "Masala Dosa", "quantity_sold": 2, "revenue": 180.0}


# =============================================================================
# LOCAL DAYS
# =============================================================================

@pytest.fixture
def india_time(monkeypatch):
    monkeypatch.setattr(get_settings(), "report_timezone", "Asia/Kolkata")


def test_orders_bucket_by_local_day(india_time):
    # 20:00 UTC on the 20th is 01:30 IST on the 21st
    saturday = reports.daily_report(RECORDS, date(2024, 1, 20))
    sunday = reports.daily_report(RECORDS, date(2024, 1, 21))
    monday = reports.daily_report(RECORDS, date(2024, 1, 15))

    assert saturday["total_orders"] == 0
    assert [o["order_number"] for o in sunday["orders"]] == ["A4", "A5"]
    assert [o["order_number"] for o in monday["orders"]] == ["A1", "A2", "A3"]
    assert monday["total_revenue"] == 500.0


def test_local_day_start(india_time):
    assert reports.local_day_start(date(2024, 1, 16)) == at(2024, 1, 15, 18, 30)


def test_report_endpoints_use_local_day(client, pos_headers, india_time):
    order = place_order(client, pos_headers)
    with sync_engine.begin() as conn:
        conn.execute(update(Order).where(Order.id == order["id"]).values(created_at=datetime(2024, 1, 20, 20, 0)))

    def daily(day):
        return client.get("/api/reports/daily", params={"date": day}, headers=pos_headers).json()["data"]

    assert daily("2024-01-20")["total_orders"] == 0
    assert daily("2024-01-21")["total_orders"] == 1

    items = client.get(
        "/api/reports/items", params={"start": "2024-01-19", "end": "2024-01-21"}, headers=pos_headers
    ).json()["data"]
    assert {i["item_name"] for i in items["items"]} == {"Masala Dosa", "Filter Coffee"}

    before = client.get(
        "/api/reports/items", params={"start": "2024-01-19", "end": "2024-01-20"}, headers=pos_headers
    ).json()["data"]
    assert before["items"] == []
