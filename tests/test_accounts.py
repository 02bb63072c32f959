"""Super-admin account console."""

import pytest

from conftest import create_account, expire_license, login, place_order
from restopos.services import accounts as accounts_service


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"mobile_number": "98765", "pin": "12345678", "restaurant_name": "A"},
         "Mobile number must be exactly 10 digits"),
        ({"mobile_number": "98765abcde", "pin": "12345678", "restaurant_name": "A"},
         "Mobile number must be exactly 10 digits"),
        ({"mobile_number": "9876543210", "pin": "1234", "restaurant_name": "A"},
         "PIN must be exactly 8 digits"),
        ({"mobile_number": "9876543210", "pin": "12345678", "restaurant_name": "   "},
         "Restaurant name is required"),
        ({"mobile_number": "9876543210", "pin": "12345678", "restaurant_name": "A", "license_duration_days": 0},
         "License duration must be at least 1 day"),
    ],
)
def test_create_account_validation(client, admin_headers, payload, message):
    response = client.post("/api/admin/accounts", json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_create_account_defaults(client, admin_headers, account, pos_headers):
    assert account["status"] == "active"
    assert account["license_status"] == "active"
    assert account["total_orders"] == 0

    settings = client.get("/api/settings", headers=pos_headers).json()["data"]
    assert settings["restaurant_name"] == "Spice Garden"
    assert settings["tax_rate"] == 5.0
    assert settings["gst_inclusive"] is True

    categories = client.get("/api/menu/categories", headers=pos_headers).json()["data"]
    assert categories == ["Starters", "Mains", "Desserts", "Beverages"]


def test_duplicate_mobile_number(client, admin_headers, account):
    response = client.post(
        "/api/admin/accounts",
        json={"mobile_number": "9876543210", "pin": "87654321", "restaurant_name": "Copy"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["message"] == "An account with this mobile number already exists"


def test_toggle_status_flips_back_and_forth(client, admin_headers, account):
    url = f"/api/admin/accounts/{account['id']}/toggle-status"

    assert client.post(url, headers=admin_headers).json()["data"]["new_status"] == "disabled"
    assert client.post(url, headers=admin_headers).json()["data"]["new_status"] == "active"


def test_toggle_unknown_account(client, admin_headers):
    response = client.post("/api/admin/accounts/missing/toggle-status", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Account not found"


def test_search_by_name_and_mobile(client, admin_headers):
    create_account(client, admin_headers, mobile="9000000001", name="Spice Garden")
    create_account(client, admin_headers, mobile="9000000002", name="Dosa Corner")
    create_account(client, admin_headers, mobile="8000000003", name="Chai Point")

    by_name = client.get("/api/admin/accounts", params={"search": "dosa"}, headers=admin_headers).json()["data"]
    assert by_name["total_count"] == 1
    assert by_name["accounts"][0]["restaurant_name"] == "Dosa Corner"

    by_mobile = client.get("/api/admin/accounts", params={"search": "90000"}, headers=admin_headers).json()["data"]
    assert by_mobile["total_count"] == 2


def test_search_treats_wildcards_literally(client, admin_headers):
    create_account(client, admin_headers, mobile="9000000001", name="100% Veg")
    create_account(client, admin_headers, mobile="9000000002", name="Dosa Corner")

    def names(term):
        data = client.get("/api/admin/accounts", params={"search": term}, headers=admin_headers).json()["data"]
        return [a["restaurant_name"] for a in data["accounts"]]

    assert names("%") == ["100% Veg"]
    assert names("_") == []


def test_search_status_filters(client, admin_headers):
    active = create_account(client, admin_headers, mobile="9000000001", name="Active")
    disabled = create_account(client, admin_headers, mobile="9000000002", name="Disabled")
    expired = create_account(client, admin_headers, mobile="9000000003", name="Expired")
    client.post(f"/api/admin/accounts/{disabled['id']}/toggle-status", headers=admin_headers)
    expire_license(expired["id"])

    def names(status):
        data = client.get("/api/admin/accounts", params={"status": status}, headers=admin_headers).json()["data"]
        return {a["restaurant_name"] for a in data["accounts"]}

    assert names("active") == {"Active"}
    assert names("disabled") == {"Disabled"}
    assert names("expired") == {"Expired"}
    assert active["id"]


def test_all_accounts_newest_first(client, admin_headers, account):
    create_account(client, admin_headers, mobile="9000000009", name="Dosa Corner")

    rows = client.get("/api/admin/accounts/all", headers=admin_headers).json()["data"]

    assert [r["restaurant_name"] for r in rows] == ["Dosa Corner", "Spice Garden"]
    assert rows[1]["days_remaining"] == 365
    assert set(rows[0]) >= {"license_valid_until", "license_status", "total_orders", "total_revenue", "last_active"}


def test_search_rejects_unknown_status(client, admin_headers):
    response = client.get("/api/admin/accounts", params={"status": "paused"}, headers=admin_headers)

    assert response.status_code == 400


def test_search_pagination(client, admin_headers):
    for i in range(5):
        create_account(client, admin_headers, mobile=f"900000000{i}", name=f"Place {i}")

    data = client.get("/api/admin/accounts", params={"limit": 2, "offset": 2}, headers=admin_headers).json()["data"]

    assert data["total_count"] == 5
    assert len(data["accounts"]) == 2


def test_expired_row_reports_zero_days(client, admin_headers, account):
    expire_license(account["id"])

    row = client.get("/api/admin/accounts", headers=admin_headers).json()["data"]["accounts"][0]

    assert row["license_status"] == "expired"
    assert row["days_remaining"] == 0


def test_extend_license_from_today_when_lapsed(client, admin_headers, account):
    expire_license(account["id"])

    response = client.post(
        f"/api/admin/accounts/{account['id']}/extend-license", json={"days": 30}, headers=admin_headers
    )
    row = response.json()["data"]

    assert row["license_status"] == "active"
    assert row["days_remaining"] == 30
    login(client)


def test_extend_license_adds_to_current_window(client, admin_headers, account):
    response = client.post(
        f"/api/admin/accounts/{account['id']}/extend-license", json={"days": 10}, headers=admin_headers
    )

    assert response.json()["data"]["days_remaining"] == 375


def test_full_details(client, admin_headers, account, pos_headers):
    client.post("/api/digital-menu/initialize", headers=pos_headers)

    data = client.get(f"/api/admin/accounts/{account['id']}", headers=admin_headers).json()["data"]

    assert data["account"]["mobile_number"] == "9876543210"
    assert data["settings"]["restaurant_name"] == "Spice Garden"
    assert data["subscription"]["license_status"] == "active"
    assert data["telemetry"]["total_orders"] == 0
    assert data["digital_menu"]["public_url_slug"] == "spice-garden"
    assert data["active_theme"]["theme_name"] == "modern"


def test_console_stats(client, admin_headers, account, pos_headers):
    place_order(client, pos_headers)
    other = create_account(client, admin_headers, mobile="9000000009", name="Other")
    client.post(f"/api/admin/accounts/{other['id']}/toggle-status", headers=admin_headers)

    stats = client.get("/api/admin/stats", headers=admin_headers).json()["data"]

    assert stats == {"total_accounts": 2, "active_accounts": 1, "total_orders": 1, "total_revenue": 210.0}


def test_admin_views_account_menu_and_orders(client, admin_headers, account, pos_headers):
    client.post("/api/menu/items", json={"name": "Idli", "price": 50, "category": "Starters"}, headers=pos_headers)
    place_order(client, pos_headers)

    menu = client.get(f"/api/admin/accounts/{account['id']}/menu", headers=admin_headers).json()["data"]
    orders = client.get(f"/api/admin/accounts/{account['id']}/orders", headers=admin_headers).json()["data"]

    assert [i["name"] for i in menu["menu_items"]] == ["Idli"]
    assert "Starters" in menu["categories"]
    assert orders["total_count"] == 1
    assert orders["orders"][0]["total_amount"] == 210.0


def test_admin_settings_round_trip(client, admin_headers):
    response = client.put(
        "/api/admin/settings",
        json={"setting_key": "order_edit_mode", "setting_value": "time_limited", "setting_metadata": {"minutes": 15}},
        headers=admin_headers,
    )
    assert response.status_code == 200

    settings = client.get("/api/admin/settings", headers=admin_headers).json()["data"]
    assert settings == [
        {"setting_key": "order_edit_mode", "setting_value": "time_limited", "setting_metadata": {"minutes": 15}}
    ]


@pytest.mark.parametrize(
    "value, metadata",
    [("sometimes", None), ("time_limited", None), ("time_limited", {"minutes": 0}), ("time_limited", {"minutes": 1441})],
)
def test_admin_settings_validation(client, admin_headers, value, metadata):
    response = client.put(
        "/api/admin/settings",
        json={"setting_key": "order_edit_mode", "setting_value": value, "setting_metadata": metadata},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_license_defaults_to_configured_days(client, admin_headers, monkeypatch):
    monkeypatch.setattr(accounts_service.settings, "default_license_days", 90)

    response = client.post(
        "/api/admin/accounts",
        json={"mobile_number": "9876543210", "pin": "12345678", "restaurant_name": "Spice Garden"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["data"]["days_remaining"] == 90
