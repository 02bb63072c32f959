"""
POS Account Service

Login for restaurants and super-admins, and the super-admin console:
creating accounts with a license, enabling/disabling them, listing and
searching them with license and telemetry figures.
"""

import logging
import math
import re
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restopos.core.config import get_settings
from restopos.core.exceptions import (
    AuthenticationFailed,
    Conflict,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from restopos.core.timeutils import as_utc, isoformat, utcnow
from restopos.models import (
    AccountStatus,
    AdminUser,
    DigitalMenu,
    MenuThemeSelection,
    PosAccount,
    PosCategory,
    PosSettings,
    PosSubscription,
    PosTelemetry,
    SessionKind,
)
from restopos.schemas import (
    DigitalMenuOut,
    PosAccountOut,
    PosSettingsOut,
    SubscriptionOut,
    TelemetryOut,
    ThemeSelectionOut,
    dump,
)
from restopos.services import security

settings = get_settings()
logger = logging.getLogger(__name__)

MOBILE_PATTERN = re.compile(r"^\d{10}$")
PIN_PATTERN = re.compile(r"^\d{8}$")

ACCOUNT_STATUS_FILTERS = ("active", "disabled", "expired")
LIKE_ESCAPE = "\\"


# =============================================================================
# LICENSE HELPERS
# =============================================================================

def latest_subscription(account: PosAccount) -> Optional[PosSubscription]:
    """The subscription with the furthest ``valid_until``."""
    if not account.subscriptions:
        return None
    return max(account.subscriptions, key=lambda s: as_utc(s.valid_until))


def license_summary(subscription: Optional[PosSubscription]) -> dict[str, Any]:
    """
    License status of an account.

    ``days_remaining`` counts partial days as whole days and never goes
    below zero.
    """
    if subscription is None:
        return {"license_valid_until": None, "license_status": "expired", "days_remaining": 0}

    valid_until = as_utc(subscription.valid_until)
    remaining = (valid_until - utcnow()).total_seconds() / 86400
    return {
        "license_valid_until": isoformat(valid_until),
        "license_status": "active" if remaining > 0 else "expired",
        "days_remaining": max(0, math.ceil(remaining)),
    }


def is_license_valid(account: PosAccount) -> bool:
    subscription = latest_subscription(account)
    return subscription is not None and as_utc(subscription.valid_until) > utcnow()


def _account_query():
    return select(PosAccount).options(
        selectinload(PosAccount.settings),
        selectinload(PosAccount.subscriptions),
        selectinload(PosAccount.telemetry),
    )


async def load_account(db: AsyncSession, account_id: str) -> PosAccount:
    """Fetch an account with settings, subscriptions and telemetry loaded."""
    result = await db.execute(_account_query().where(PosAccount.id == account_id))
    account = result.scalar_one_or_none()
    if account is None:
        raise NotFound("Account not found")
    return account


def account_row(account: PosAccount) -> dict[str, Any]:
    """Console row: account fields plus license and telemetry figures."""
    telemetry = account.telemetry
    row = {
        "id": account.id,
        "mobile_number": account.mobile_number,
        "restaurant_name": account.restaurant_name,
        "status": account.status.value,
        "created_at": isoformat(account.created_at),
    }
    row.update(license_summary(latest_subscription(account)))
    row.update({
        "total_orders": telemetry.total_orders if telemetry else 0,
        "total_revenue": round(telemetry.total_revenue, 2) if telemetry else 0.0,
        "last_active": isoformat(telemetry.last_active) if telemetry else None,
    })
    return row


# =============================================================================
# LOGIN
# =============================================================================

async def pos_login(db: AsyncSession, mobile_number: str, pin: str) -> dict[str, Any]:
    """
    Authenticate a restaurant by mobile number and PIN.

    Returns:
        ``{account, settings, subscription, token}``
    """
    mobile_number = (mobile_number or "").strip()
    result = await db.execute(_account_query().where(PosAccount.mobile_number == mobile_number))
    account = result.scalar_one_or_none()

    if account is None or not security.verify_secret(pin or "", account.pin_hash):
        logger.info(f"Failed POS login for {mobile_number}")
        raise AuthenticationFailed("Invalid mobile number or PIN")

    if account.status != AccountStatus.ACTIVE:
        raise PermissionDenied("Account is disabled. Please contact support.")

    if not is_license_valid(account):
        raise PermissionDenied("License expired. Please renew your subscription.")

    if account.telemetry is None:
        account.telemetry = PosTelemetry(pos_account_id=account.id)
    account.telemetry.last_active = utcnow()

    session = await security.create_session(db, SessionKind.POS, account.id)
    await db.commit()

    logger.info(f"POS login: {account.restaurant_name} ({account.mobile_number})")

    return {
        "account": dump(PosAccountOut, account),
        "settings": dump(PosSettingsOut, account.settings),
        "subscription": dump(SubscriptionOut, latest_subscription(account)),
        "token": session.token,
    }


async def admin_login(db: AsyncSession, username: str, password: str) -> dict[str, Any]:
    """Authenticate the super-admin. Returns ``{admin, token}``."""
    result = await db.execute(select(AdminUser).where(AdminUser.username == (username or "").strip()))
    admin = result.scalar_one_or_none()

    if admin is None or not security.verify_secret(password or "", admin.password_hash):
        logger.info(f"Failed admin login for {username}")
        raise AuthenticationFailed("Invalid credentials")

    session = await security.create_session(db, SessionKind.ADMIN, admin.id)
    await db.commit()

    logger.info(f"Admin login: {admin.username}")
    return {
        "admin": {"id": admin.id, "username": admin.username},
        "token": session.token,
    }


async def ensure_admin_user(db: AsyncSession, username: str, password: str) -> bool:
    """
    Create the super-admin if no user with that name exists.

    Returns:
        True when a user was created
    """
    result = await db.execute(select(AdminUser).where(AdminUser.username == username))
    if result.scalar_one_or_none() is not None:
        return False

    db.add(AdminUser(username=username, password_hash=security.hash_secret(password)))
    await db.commit()
    logger.info(f"Created admin user '{username}'")
    return True


# =============================================================================
# ACCOUNT MANAGEMENT
# =============================================================================

async def create_pos_account(
    db: AsyncSession,
    mobile_number: str,
    pin: str,
    restaurant_name: str,
    license_duration_days: Optional[int] = None,
) -> dict[str, Any]:
    """
    Create a restaurant account with its settings, license and telemetry.

    Without a duration the license runs for ``DEFAULT_LICENSE_DAYS``.

    The account starts with the default categories and the default tax
    rate (GST inclusive).
    """
    mobile_number = (mobile_number or "").strip()
    pin = (pin or "").strip()
    restaurant_name = (restaurant_name or "").strip()

    if not MOBILE_PATTERN.match(mobile_number):
        raise ValidationFailed("Mobile number must be exactly 10 digits")
    if not PIN_PATTERN.match(pin):
        raise ValidationFailed("PIN must be exactly 8 digits")
    if not restaurant_name:
        raise ValidationFailed("Restaurant name is required")
    if license_duration_days is None:
        license_duration_days = settings.default_license_days
    if license_duration_days < 1:
        raise ValidationFailed("License duration must be at least 1 day")

    existing = await db.execute(select(PosAccount.id).where(PosAccount.mobile_number == mobile_number))
    if existing.scalar_one_or_none() is not None:
        raise Conflict("An account with this mobile number already exists")

    now = utcnow()
    account = PosAccount(
        mobile_number=mobile_number,
        pin_hash=security.hash_secret(pin),
        restaurant_name=restaurant_name,
        status=AccountStatus.ACTIVE,
    )
    account.settings = PosSettings(
        restaurant_name=restaurant_name,
        tax_rate=settings.default_tax_rate,
        gst_inclusive=True,
    )
    account.subscriptions = [
        PosSubscription(
            status="active",
            valid_from=now,
            valid_until=now + timedelta(days=license_duration_days),
        )
    ]
    account.telemetry = PosTelemetry(total_orders=0, total_revenue=0.0)
    db.add(account)
    await db.flush()

    for position, name in enumerate(settings.default_categories_list):
        db.add(PosCategory(pos_account_id=account.id, name=name, position=position))

    await db.commit()
    logger.info(
        f"Created POS account {account.id} for {restaurant_name} "
        f"({license_duration_days} day license)"
    )

    return account_row(account)


async def toggle_pos_account_status(db: AsyncSession, account_id: str) -> dict[str, Any]:
    """Flip an account between active and disabled."""
    account = await db.get(PosAccount, account_id)
    if account is None:
        raise NotFound("Account not found")

    account.status = (
        AccountStatus.DISABLED if account.status == AccountStatus.ACTIVE else AccountStatus.ACTIVE
    )
    await db.commit()

    logger.info(f"Account {account_id} is now {account.status.value}")
    return {"account_id": account_id, "new_status": account.status.value}


async def extend_license(db: AsyncSession, account_id: str, days: int) -> dict[str, Any]:
    """Add ``days`` to the license, counting from today if it already lapsed."""
    if days is None or days < 1:
        raise ValidationFailed("License duration must be at least 1 day")

    account = await load_account(db, account_id)
    now = utcnow()
    current = latest_subscription(account)
    start = max(as_utc(current.valid_until), now) if current else now

    account.subscriptions.append(
        PosSubscription(status="active", valid_from=now, valid_until=start + timedelta(days=days))
    )
    await db.commit()

    logger.info(f"License of {account_id} extended by {days} days")
    return account_row(account)


async def get_pos_accounts(db: AsyncSession) -> list[dict[str, Any]]:
    """All accounts, newest first."""
    result = await db.execute(_account_query().order_by(PosAccount.created_at.desc()))
    return [account_row(a) for a in result.scalars().all()]


async def search_pos_accounts(
    db: AsyncSession,
    search_term: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """
    Search accounts by restaurant name or mobile number.

    ``status`` filters on ``active`` (enabled with a valid license),
    ``disabled`` or ``expired`` (license lapsed).
    """
    if status and status not in ACCOUNT_STATUS_FILTERS:
        raise ValidationFailed(f"Invalid status. Options: {list(ACCOUNT_STATUS_FILTERS)}")

    license_end = (
        select(
            PosSubscription.pos_account_id.label("account_id"),
            func.max(PosSubscription.valid_until).label("valid_until"),
        )
        .group_by(PosSubscription.pos_account_id)
        .subquery()
    )

    conditions = []
    if search_term and search_term.strip():
        term = search_term.strip().lower()
        for char in (LIKE_ESCAPE, "%", "_"):
            term = term.replace(char, LIKE_ESCAPE + char)
        term = f"%{term}%"
        conditions.append(
            or_(
                func.lower(PosAccount.restaurant_name).like(term, escape=LIKE_ESCAPE),
                PosAccount.mobile_number.like(term, escape=LIKE_ESCAPE),
            )
        )

    now = utcnow()
    if status == "disabled":
        conditions.append(PosAccount.status == AccountStatus.DISABLED)
    elif status == "expired":
        conditions.append(or_(license_end.c.valid_until.is_(None), license_end.c.valid_until <= now))
    elif status == "active":
        conditions.append(PosAccount.status == AccountStatus.ACTIVE)
        conditions.append(license_end.c.valid_until > now)

    joined = _account_query().outerjoin(license_end, license_end.c.account_id == PosAccount.id)
    count_query = (
        select(func.count(PosAccount.id))
        .select_from(PosAccount)
        .outerjoin(license_end, license_end.c.account_id == PosAccount.id)
    )
    for condition in conditions:
        joined = joined.where(condition)
        count_query = count_query.where(condition)

    total_count = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        joined.order_by(PosAccount.created_at.desc()).offset(max(offset, 0)).limit(max(limit, 1))
    )

    return {
        "accounts": [account_row(a) for a in result.scalars().all()],
        "total_count": total_count,
    }


async def get_account_full_details(db: AsyncSession, account_id: str) -> dict[str, Any]:
    """Everything the console shows about one account."""
    account = await load_account(db, account_id)

    menu_result = await db.execute(select(DigitalMenu).where(DigitalMenu.pos_account_id == account_id))
    theme_result = await db.execute(
        select(MenuThemeSelection).where(
            MenuThemeSelection.pos_account_id == account_id,
            MenuThemeSelection.active.is_(True),
        )
    )

    subscription = latest_subscription(account)
    subscription_data = dump(SubscriptionOut, subscription)
    if subscription_data is not None:
        subscription_data.update(license_summary(subscription))

    return {
        "account": dump(PosAccountOut, account),
        "settings": dump(PosSettingsOut, account.settings),
        "subscription": subscription_data,
        "telemetry": dump(TelemetryOut, account.telemetry),
        "digital_menu": dump(DigitalMenuOut, menu_result.scalar_one_or_none()),
        "active_theme": dump(ThemeSelectionOut, theme_result.scalars().first()),
    }


async def get_console_stats(db: AsyncSession) -> dict[str, Any]:
    """Headline figures for the super-admin dashboard."""
    total_accounts = (await db.execute(select(func.count(PosAccount.id)))).scalar() or 0
    active_accounts = (
        await db.execute(
            select(func.count(PosAccount.id)).where(PosAccount.status == AccountStatus.ACTIVE)
        )
    ).scalar() or 0
    totals = (
        await db.execute(
            select(
                func.coalesce(func.sum(PosTelemetry.total_orders), 0),
                func.coalesce(func.sum(PosTelemetry.total_revenue), 0.0),
            )
        )
    ).one()

    return {
        "total_accounts": total_accounts,
        "active_accounts": active_accounts,
        "total_orders": int(totals[0]),
        "total_revenue": round(float(totals[1]), 2),
    }
