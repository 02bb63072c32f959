"""Recording orders, history, edit policy and downloads."""

import io
import re

import pandas as pd
import pytest

from conftest import backdate_order, place_order


def set_edit_mode(client, admin_headers, mode, minutes=None):
    response = client.put(
        "/api/admin/settings",
        json={
            "setting_key": "order_edit_mode",
            "setting_value": mode,
            "setting_metadata": {"minutes": minutes} if minutes else None,
        },
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text


def test_create_order_prices_lines(client, pos_headers):
    order = place_order(client, pos_headers, payment_method="UPI")

    assert order["payment_method"] == "upi"
    assert order["total_amount"] == 210.0
    assert [(i["item_name"], i["quantity"], i["total_price"]) for i in order["items"]] == [
        ("Masala Dosa", 2, 180.0),
        ("Filter Coffee", 1, 30.0),
    ]


def test_generated_order_numbers_count_up_per_day(client, pos_headers):
    first = place_order(client, pos_headers)["order_number"]
    second = place_order(client, pos_headers)["order_number"]

    assert re.fullmatch(r"\d{8}-0001", first)
    assert second == first[:-4] + "0002"


def test_client_order_number_is_kept(client, pos_headers):
    order = place_order(client, pos_headers, order_number="T1-0042")

    assert order["order_number"] == "T1-0042"


def test_duplicate_order_number(client, pos_headers):
    place_order(client, pos_headers, order_number="T1-0042")

    response = client.post(
        "/api/orders",
        json={"items": [{"name": "Tea", "price": 20, "quantity": 1}], "payment_method": "cash", "order_number": "T1-0042"},
        headers=pos_headers,
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Order number T1-0042 already exists"


def test_matching_client_total_is_accepted(client, pos_headers):
    order = place_order(client, pos_headers, total_amount=210.004)

    assert order["total_amount"] == 210.0


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"items": [], "payment_method": "cash"}, "Cart is empty"),
        ({"items": [{"name": "Tea", "price": 20, "quantity": 1}], "payment_method": "cheque"},
         "Invalid payment method. Options: ['cash', 'upi', 'card']"),
        ({"items": [{"name": "Tea", "price": 20, "quantity": 2}], "payment_method": "cash", "total_amount": 45},
         "Order total 45.00 does not match items total 40.00"),
    ],
)
def test_order_validation(client, pos_headers, payload, message):
    response = client.post("/api/orders", json=payload, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_order_updates_telemetry(client, admin_headers, account, pos_headers):
    place_order(client, pos_headers)
    place_order(client, pos_headers, items=[{"name": "Tea", "price": 20, "quantity": 3}])

    row = client.get("/api/admin/accounts", headers=admin_headers).json()["data"]["accounts"][0]

    assert row["total_orders"] == 2
    assert row["total_revenue"] == 270.0
    assert row["last_active"] is not None


def test_orders_listed_newest_first(client, pos_headers):
    first = place_order(client, pos_headers)
    backdate_order(first["id"], hours=2)
    second = place_order(client, pos_headers)

    orders = client.get("/api/orders", headers=pos_headers).json()["data"]

    assert [o["id"] for o in orders] == [second["id"], first["id"]]
    assert orders[0]["items"]


def test_orders_limit(client, pos_headers):
    for _ in range(3):
        place_order(client, pos_headers)

    orders = client.get("/api/orders", params={"limit": 2}, headers=pos_headers).json()["data"]

    assert len(orders) == 2


def test_get_unknown_order(client, pos_headers):
    response = client.get("/api/orders/missing", headers=pos_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


# =============================================================================
# EDIT POLICY
# =============================================================================

def test_recent_order_is_editable_by_default(client, pos_headers):
    order = place_order(client, pos_headers)

    verdict = client.get(f"/api/orders/{order['id']}/can-edit", headers=pos_headers).json()["data"]

    assert verdict["can_edit"] is True
    assert verdict["minutes_remaining"] == 30
    assert verdict["message"] == "Order can be edited for 30 more minute(s)"


def test_old_order_is_locked_by_default(client, pos_headers):
    order = place_order(client, pos_headers)
    backdate_order(order["id"], minutes=45)

    verdict = client.get(f"/api/orders/{order['id']}/can-edit", headers=pos_headers).json()["data"]
    assert verdict == {
        "can_edit": False,
        "message": "Orders can only be edited within 30 minutes of creation",
        "minutes_remaining": 0,
    }

    response = client.patch(
        f"/api/orders/{order['id']}/payment-method", json={"payment_method": "card"}, headers=pos_headers
    )
    assert response.status_code == 403


def test_change_payment_method(client, pos_headers):
    order = place_order(client, pos_headers)

    response = client.patch(
        f"/api/orders/{order['id']}/payment-method", json={"payment_method": "card"}, headers=pos_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["payment_method"] == "card"


def test_editing_switched_off(client, admin_headers, pos_headers):
    set_edit_mode(client, admin_headers, "off")
    order = place_order(client, pos_headers)

    verdict = client.get(f"/api/orders/{order['id']}/can-edit", headers=pos_headers).json()["data"]

    assert verdict["can_edit"] is False
    assert verdict["message"] == "Order editing is disabled by the administrator"


def test_unlimited_editing(client, admin_headers, pos_headers):
    set_edit_mode(client, admin_headers, "unlimited")
    order = place_order(client, pos_headers)
    backdate_order(order["id"], days=90)

    verdict = client.get(f"/api/orders/{order['id']}/can-edit", headers=pos_headers).json()["data"]

    assert verdict["can_edit"] is True
    assert verdict["minutes_remaining"] is None


def test_custom_time_limit(client, admin_headers, pos_headers):
    set_edit_mode(client, admin_headers, "time_limited", minutes=5)
    order = place_order(client, pos_headers)
    backdate_order(order["id"], minutes=10)

    verdict = client.get(f"/api/orders/{order['id']}/can-edit", headers=pos_headers).json()["data"]

    assert verdict["can_edit"] is False
    assert verdict["message"] == "Orders can only be edited within 5 minutes of creation"


def test_admin_bypasses_edit_policy(client, admin_headers, account, pos_headers):
    set_edit_mode(client, admin_headers, "off")
    order = place_order(client, pos_headers)

    response = client.patch(
        f"/api/admin/accounts/{account['id']}/orders/{order['id']}/payment-method",
        json={"payment_method": "upi"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["payment_method"] == "upi"


# =============================================================================
# DOWNLOADS
# =============================================================================

def test_receipt_pdf(client, pos_headers):
    order = place_order(client, pos_headers)

    response = client.get(f"/api/orders/{order['id']}/receipt.pdf", headers=pos_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert f"receipt-{order['order_number']}.pdf" in response.headers["content-disposition"]


def test_order_history_workbook(client, pos_headers):
    place_order(client, pos_headers, payment_method="card")

    response = client.get("/api/orders/export.xlsx", headers=pos_headers)
    frame = pd.read_excel(io.BytesIO(response.content), engine="openpyxl")

    assert response.status_code == 200
    assert list(frame.columns) == [
        "Order Number", "Date", "Time", "Payment Method", "Items", "Item Count", "Total Amount",
    ]
    assert frame.loc[0, "Payment Method"] == "CARD"
    assert frame.loc[0, "Items"] == "2x Masala Dosa, 1x Filter Coffee"
    assert frame.loc[0, "Item Count"] == 3
    assert frame.loc[0, "Total Amount"] == 210.0
