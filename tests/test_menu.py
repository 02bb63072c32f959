"""Menu items, categories and restaurant settings."""

import pytest


def add_item(client, headers, **fields):
    payload = {"name": "Paneer Tikka", "price": 240, "category": "Starters", **fields}
    response = client.post("/api/menu/items", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_items_sorted_by_category_then_name(client, pos_headers):
    add_item(client, pos_headers, name="Veg Biryani", category="Mains")
    add_item(client, pos_headers, name="Samosa", category="Starters")
    add_item(client, pos_headers, name="Dal Makhani", category="Mains")

    items = client.get("/api/menu/items", headers=pos_headers).json()["data"]

    assert [(i["category"], i["name"]) for i in items] == [
        ("Mains", "Dal Makhani"),
        ("Mains", "Veg Biryani"),
        ("Starters", "Samosa"),
    ]


def test_update_keeps_image_when_none_given(client, pos_headers):
    item = add_item(client, pos_headers, image="https://img.example.com/tikka.jpg")

    updated = add_item(client, pos_headers, item_id=item["id"], name="Paneer Tikka Dry", price=260)

    assert updated["id"] == item["id"]
    assert updated["name"] == "Paneer Tikka Dry"
    assert updated["price"] == 260
    assert updated["image"] == "https://img.example.com/tikka.jpg"
    assert len(client.get("/api/menu/items", headers=pos_headers).json()["data"]) == 1


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"name": "  "}, "Item name is required"),
        ({"category": ""}, "Category is required"),
        ({"price": 0}, "Price must be greater than 0"),
        ({"price": -5}, "Price must be greater than 0"),
    ],
)
def test_item_validation(client, pos_headers, fields, message):
    payload = {"name": "Paneer Tikka", "price": 240, "category": "Starters", **fields}
    response = client.post("/api/menu/items", json=payload, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_update_unknown_item(client, pos_headers):
    response = client.post(
        "/api/menu/items",
        json={"name": "Ghost", "price": 10, "category": "Starters", "item_id": "missing"},
        headers=pos_headers,
    )

    assert response.status_code == 404
    assert response.json()["message"] == "Menu item not found"


def test_new_category_is_appended(client, pos_headers):
    add_item(client, pos_headers, name="Mango Lassi", category="Shakes")

    categories = client.get("/api/menu/categories", headers=pos_headers).json()["data"]

    assert categories[-1] == "Shakes"
    assert categories.count("Shakes") == 1


def test_delete_item(client, pos_headers):
    item = add_item(client, pos_headers)

    response = client.delete(f"/api/menu/items/{item['id']}", headers=pos_headers)
    assert response.json()["data"] == {"deleted_id": item["id"]}
    assert client.get("/api/menu/items", headers=pos_headers).json()["data"] == []

    again = client.delete(f"/api/menu/items/{item['id']}", headers=pos_headers)
    assert again.status_code == 404


def test_categories_are_trimmed_and_deduplicated(client, pos_headers):
    response = client.put(
        "/api/menu/categories",
        json={"categories": [" Chaat ", "Thali", "Chaat", "", "Sweets"]},
        headers=pos_headers,
    )

    assert response.json()["data"] == ["Chaat", "Thali", "Sweets"]
    assert client.get("/api/menu/categories", headers=pos_headers).json()["data"] == ["Chaat", "Thali", "Sweets"]


def test_categories_cannot_be_empty(client, pos_headers):
    response = client.put("/api/menu/categories", json={"categories": ["  "]}, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "At least one category is required"


# =============================================================================
# SETTINGS
# =============================================================================

def test_save_settings_renames_account(client, admin_headers, account, pos_headers):
    payload = {
        "restaurant_name": "Spice Garden Express",
        "address": "12 MG Road, Pune",
        "phone": "020-5555-1234",
        "email": "hello@spicegarden.in",
        "fssai_number": "11521999000123",
        "tax_rate": 12,
        "gst_inclusive": False,
    }
    data = client.put("/api/settings", json=payload, headers=pos_headers).json()["data"]

    assert data["tax_rate"] == 12.0
    assert data["gst_inclusive"] is False
    assert data["fssai_number"] == "11521999000123"

    row = client.get("/api/admin/accounts", headers=admin_headers).json()["data"]["accounts"][0]
    assert row["restaurant_name"] == "Spice Garden Express"


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"restaurant_name": " "}, "Restaurant name is required"),
        ({"tax_rate": 101}, "Tax rate must be between 0 and 100"),
        ({"tax_rate": -1}, "Tax rate must be between 0 and 100"),
        ({"email": "not-an-email"}, "Invalid email format"),
    ],
)
def test_settings_validation(client, pos_headers, fields, message):
    payload = {"restaurant_name": "Spice Garden", "tax_rate": 5, **fields}
    response = client.put("/api/settings", json=payload, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_default_order_edit_policy(client, pos_headers):
    policy = client.get("/api/settings/order-edit-policy", headers=pos_headers).json()["data"]

    assert policy == {"mode": "time_limited", "minutes": 30}
