"""Digital menu management, the public page and QR/PDF downloads."""

import pytest

from conftest import create_account, login
from restopos.services.digital_menu import format_price, slugify

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.mark.parametrize(
    "name, slug",
    [
        ("Spice Garden", "spice-garden"),
        ("  Café @ MG Road!! ", "caf-mg-road"),
        ("Dosa--Corner 24x7", "dosa-corner-24x7"),
        ("!!!", "menu"),
        (None, "menu"),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


@pytest.mark.parametrize("price, label", [(240, "₹240"), (12.5, "₹13"), (2.5, "₹3"), (99.49, "₹99")])
def test_format_price_rounds_halves_up(price, label):
    assert format_price(price) == label


@pytest.fixture
def published(client, pos_headers):
    """Initialized menu with a starter and a main."""
    client.post("/api/menu/items", json={"name": "Paneer Tikka", "price": 240, "category": "Starters"},
                headers=pos_headers)
    client.post("/api/menu/items", json={"name": "Dal Makhani", "price": 280, "category": "Mains"},
                headers=pos_headers)
    response = client.post("/api/digital-menu/initialize", headers=pos_headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]


def test_initialize_creates_menu_and_default_theme(published):
    assert published["digital_menu"]["public_url_slug"] == "spice-garden"
    assert published["digital_menu"]["is_active"] is True
    assert published["digital_menu"]["qr_code_generated"] is False
    assert published["active_theme"]["theme_name"] == "modern"
    assert published["public_url"] == "https://menu.example.com/menu/spice-garden"


def test_initialize_is_idempotent(client, pos_headers, published):
    again = client.post("/api/digital-menu/initialize", headers=pos_headers).json()["data"]

    assert again["digital_menu"]["public_url_slug"] == published["digital_menu"]["public_url_slug"]
    assert again["active_theme"]["theme_name"] == "modern"


def test_slug_collision_gets_suffix(client, admin_headers, published):
    create_account(client, admin_headers, mobile="9123456789", name="Spice Garden!")
    other = login(client, mobile="9123456789")

    data = client.post("/api/digital-menu/initialize", headers=other).json()["data"]

    assert data["digital_menu"]["public_url_slug"] == "spice-garden-2"


def test_settings_before_initialize(client, pos_headers):
    data = client.get("/api/digital-menu", headers=pos_headers).json()["data"]

    assert data == {"digital_menu": None, "active_theme": None, "public_url": None}


def test_themes_catalogue(client):
    themes = client.get("/api/digital-menu/themes").json()["data"]

    assert len(themes) == 10
    assert themes[0]["id"] == "modern"


def test_switch_theme_with_custom_colours(client, pos_headers, published):
    response = client.put(
        "/api/digital-menu/theme",
        json={"theme_name": "elegant", "custom_colors": {"primary": "#aa3300", "textSecondary": "#555555"}},
        headers=pos_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["custom_colors"] == {"primary": "#aa3300", "text_secondary": "#555555"}

    current = client.get("/api/digital-menu", headers=pos_headers).json()["data"]
    assert current["active_theme"]["theme_name"] == "elegant"

    html = client.get("/menu/spice-garden").text
    assert "--menu-primary: #aa3300;" in html
    assert "--menu-text-secondary: #555555;" in html


def test_unknown_theme(client, pos_headers, published):
    response = client.put("/api/digital-menu/theme", json={"theme_name": "neon"}, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Unknown theme 'neon'"


def test_unknown_colour_key(client, pos_headers, published):
    response = client.put(
        "/api/digital-menu/theme",
        json={"theme_name": "modern", "custom_colors": {"glow": "#ffffff"}},
        headers=pos_headers,
    )

    assert response.status_code == 400


# =============================================================================
# PUBLIC PAGE
# =============================================================================

def test_public_page(client, published):
    response = client.get("/menu/spice-garden")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "<h1>Spice Garden</h1>" in response.text
    assert "Paneer Tikka" in response.text
    assert "₹240" in response.text
    assert "Incl. GST" in response.text
    assert "Prices are subject to change without notice" in response.text


def test_public_page_category_filter(client, published):
    html = client.get("/menu/spice-garden", params={"category": "Mains"}).text

    assert "Dal Makhani" in html
    assert "Paneer Tikka" not in html


def test_public_page_search(client, published):
    html = client.get("/menu/spice-garden", params={"search": "TIKKA"}).text
    assert "Paneer Tikka" in html
    assert "Dal Makhani" not in html

    empty = client.get("/menu/spice-garden", params={"search": "pizza"}).text
    assert "No items found" in empty


def test_public_page_gst_exclusive_and_fssai(client, pos_headers, published):
    client.put(
        "/api/settings",
        json={"restaurant_name": "Spice Garden", "tax_rate": 5, "gst_inclusive": False, "fssai_number": "11521999000123"},
        headers=pos_headers,
    )

    html = client.get("/menu/spice-garden").text

    assert "* Prices are exclusive of 5% GST" in html
    assert "FSSAI License: 11521999000123" in html
    assert "Incl. GST" not in html


@pytest.mark.parametrize("theme_name", ["classic", "colorful", "tech", "professional"])
def test_public_page_renders_every_layout(client, pos_headers, published, theme_name):
    client.put("/api/digital-menu/theme", json={"theme_name": theme_name}, headers=pos_headers)

    response = client.get("/menu/spice-garden")

    assert response.status_code == 200
    assert "Dal Makhani" in response.text


def test_inactive_menu_is_not_found(client, pos_headers, published):
    client.put("/api/digital-menu/active", json={"is_active": False}, headers=pos_headers)

    response = client.get("/menu/spice-garden")

    assert response.status_code == 404
    assert "Menu Not Found" in response.text


def test_unknown_slug(client):
    page = client.get("/menu/nowhere")
    data = client.get("/api/public/menu/nowhere")

    assert page.status_code == 404
    assert data.status_code == 404
    assert data.json()["message"] == "Menu not found"


def test_disabled_account_hides_menu(client, admin_headers, account, published):
    client.post(f"/api/admin/accounts/{account['id']}/toggle-status", headers=admin_headers)

    assert client.get("/menu/spice-garden").status_code == 404


def test_admin_can_switch_menu_off(client, admin_headers, account, published):
    response = client.put(
        f"/api/admin/accounts/{account['id']}/digital-menu/active",
        json={"is_active": False},
        headers=admin_headers,
    )

    assert response.json()["data"]["is_active"] is False
    assert client.get("/menu/spice-garden").status_code == 404


def test_public_json_hides_privacy_flag(client, published):
    data = client.get("/api/public/menu/spice-garden").json()["data"]

    assert "privacy_mode" not in data["settings"]
    assert data["settings"]["restaurant_name"] == "Spice Garden"
    assert {i["name"] for i in data["menu_items"]} == {"Paneer Tikka", "Dal Makhani"}
    assert data["theme"]["theme_name"] == "modern"


# =============================================================================
# DOWNLOADS
# =============================================================================

def test_qr_png_marks_generated(client, pos_headers, published):
    response = client.get("/api/digital-menu/qr.png", params={"width": 256}, headers=pos_headers)

    assert response.status_code == 200
    assert response.content.startswith(PNG_MAGIC)
    assert "spice-garden-qr.png" in response.headers["content-disposition"]

    current = client.get("/api/digital-menu", headers=pos_headers).json()["data"]
    assert current["digital_menu"]["qr_code_generated"] is True
    assert current["digital_menu"]["last_generated_at"] is not None


def test_qr_data_url(client, pos_headers, published):
    data = client.get("/api/digital-menu/qr", headers=pos_headers).json()["data"]

    assert data["public_url"] == "https://menu.example.com/menu/spice-garden"
    assert data["data_url"].startswith("data:image/png;base64,")


def test_qr_rejects_bad_width(client, pos_headers, published):
    response = client.get("/api/digital-menu/qr.png", params={"width": 10}, headers=pos_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "QR width must be between 64 and 2048 pixels"


def test_qr_needs_menu(client, pos_headers):
    response = client.get("/api/digital-menu/qr.png", headers=pos_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Digital menu has not been set up"


def test_qr_svg(client, pos_headers, published):
    response = client.get("/api/digital-menu/qr.svg", params={"dark": "#1a237e"}, headers=pos_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert "svg" in response.text
    assert "#1a237e" in response.text


def test_menu_pdf(client, pos_headers, published):
    response = client.get("/api/digital-menu/menu.pdf", headers=pos_headers)

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
