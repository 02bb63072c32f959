"""
Pytest configuration and shared fixtures.

The environment is set before anything from ``restopos`` is imported: the
settings object is cached on first use and the engine is built at import.
Every test gets a fresh SQLite database through the ``client`` fixture.
"""

import os
import sys
import tempfile
from datetime import timedelta
from pathlib import Path

# Add project root to sys.path so ``restopos`` imports without installing
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

_TMP = Path(tempfile.mkdtemp(prefix="restopos-tests-"))
DB_PATH = _TMP / "test.db"

os.environ.update({
    "ENV_MODE": "testing",
    "DATABASE_URL": f"sqlite+aiosqlite:///{DB_PATH}",
    "ORDER_EXPORT_ENABLED": "false",
    "REPORT_TIMEZONE": "UTC",
    "ADMIN_USERNAME": "admin",
    "ADMIN_PASSWORD": "admin-secret",
    "BCRYPT_ROUNDS": "4",
    "APP_BASE_URL": "https://menu.example.com",
    "DATA_DIRECTORY": str(_TMP / "data"),
    "CORS_ORIGINS": "http://testserver",
})

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, update

from restopos.core.timeutils import utcnow
from restopos.database import Base
from restopos.main import app
from restopos.models import Order, PosSubscription

sync_engine = create_engine(f"sqlite:///{DB_PATH}")

ADMIN_CREDENTIALS = {"username": "admin", "password": "admin-secret"}


@pytest.fixture
def client():
    """TestClient on an empty database (tables and admin created at startup)."""
    import restopos.models  # noqa: F401

    Base.metadata.drop_all(sync_engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/admin/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


def create_account(client, admin_headers, mobile="9876543210", pin="12345678",
                   name="Spice Garden", days=365):
    response = client.post(
        "/api/admin/accounts",
        json={"mobile_number": mobile, "pin": pin, "restaurant_name": name, "license_duration_days": days},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def login(client, mobile="9876543210", pin="12345678"):
    response = client.post("/api/auth/pos/login", json={"mobile_number": mobile, "pin": pin})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def account(client, admin_headers):
    return create_account(client, admin_headers)


@pytest.fixture
def pos_headers(client, account):
    return login(client)


def place_order(client, headers, items=None, payment_method="cash", **extra):
    payload = {
        "items": items or [
            {"name": "Masala Dosa", "price": 90, "quantity": 2},
            {"name": "Filter Coffee", "price": 30, "quantity": 1},
        ],
        "payment_method": payment_method,
        **extra,
    }
    response = client.post("/api/orders", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def backdate_order(order_id, **delta):
    """Move an order's ``created_at`` into the past."""
    with sync_engine.begin() as conn:
        conn.execute(
            update(Order).where(Order.id == order_id).values(created_at=utcnow() - timedelta(**delta))
        )


def expire_license(account_id):
    with sync_engine.begin() as conn:
        conn.execute(
            update(PosSubscription)
            .where(PosSubscription.pos_account_id == account_id)
            .values(valid_until=utcnow() - timedelta(days=1))
        )
