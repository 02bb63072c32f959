"""
Restaurant and admin settings.

Restaurant settings are per account (name, contact details, tax). Admin
settings are global key/value pairs; the one the POS depends on is
``order_edit_mode``, which decides whether recorded orders may have
their payment method changed.
"""

import logging
import re
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.exceptions import NotFound, ValidationFailed
from restopos.models import AdminSetting, PosAccount, PosSettings
from restopos.schemas import PosSettingsOut, dump

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")

ORDER_EDIT_MODE_KEY = "order_edit_mode"
ORDER_EDIT_MODES = ("off", "unlimited", "time_limited")
DEFAULT_ORDER_EDIT_POLICY = {"mode": "time_limited", "minutes": 30}
MAX_EDIT_MINUTES = 1440


# =============================================================================
# RESTAURANT SETTINGS
# =============================================================================

async def get_pos_settings(db: AsyncSession, account_id: str) -> Optional[dict[str, Any]]:
    result = await db.execute(select(PosSettings).where(PosSettings.pos_account_id == account_id))
    return dump(PosSettingsOut, result.scalar_one_or_none())


async def upsert_pos_settings(
    db: AsyncSession,
    account_id: str,
    restaurant_name: str,
    address: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    fssai_number: Optional[str] = None,
    tax_rate: float = 0.0,
    gst_inclusive: bool = True,
    privacy_mode: bool = False,
) -> dict[str, Any]:
    """Create or replace the restaurant settings of an account."""
    restaurant_name = (restaurant_name or "").strip()
    email = (email or "").strip() or None

    if not restaurant_name:
        raise ValidationFailed("Restaurant name is required")
    if tax_rate is None or not 0 <= tax_rate <= 100:
        raise ValidationFailed("Tax rate must be between 0 and 100")
    if email and not EMAIL_PATTERN.match(email):
        raise ValidationFailed("Invalid email format")

    account = await db.get(PosAccount, account_id)
    if account is None:
        raise NotFound("Account not found")

    result = await db.execute(select(PosSettings).where(PosSettings.pos_account_id == account_id))
    row = result.scalar_one_or_none()
    if row is None:
        row = PosSettings(pos_account_id=account_id)
        db.add(row)

    row.restaurant_name = restaurant_name
    row.address = (address or "").strip() or None
    row.phone = (phone or "").strip() or None
    row.email = email
    row.fssai_number = (fssai_number or "").strip() or None
    row.tax_rate = float(tax_rate)
    row.gst_inclusive = bool(gst_inclusive)
    row.privacy_mode = bool(privacy_mode)

    # Keep the console listing in step with the receipt header
    account.restaurant_name = restaurant_name

    await db.commit()
    logger.info(f"Settings saved for account {account_id}")
    return dump(PosSettingsOut, row)


# =============================================================================
# ADMIN SETTINGS
# =============================================================================

def _validate_admin_setting(key: str, value: str, metadata: Optional[dict]) -> Optional[dict]:
    if key != ORDER_EDIT_MODE_KEY:
        return metadata

    if value not in ORDER_EDIT_MODES:
        raise ValidationFailed(f"Invalid order edit mode. Options: {list(ORDER_EDIT_MODES)}")

    if value != "time_limited":
        return metadata

    minutes = (metadata or {}).get("minutes")
    try:
        minutes = int(minutes)
    except (TypeError, ValueError):
        raise ValidationFailed("Time limit in minutes is required for time_limited mode")
    if not 1 <= minutes <= MAX_EDIT_MINUTES:
        raise ValidationFailed(f"Time limit must be between 1 and {MAX_EDIT_MINUTES} minutes")
    return {**(metadata or {}), "minutes": minutes}


async def get_admin_settings(db: AsyncSession) -> list[dict[str, Any]]:
    result = await db.execute(select(AdminSetting).order_by(AdminSetting.setting_key))
    return [
        {
            "setting_key": s.setting_key,
            "setting_value": s.setting_value,
            "setting_metadata": s.setting_metadata,
        }
        for s in result.scalars().all()
    ]


async def upsert_admin_setting(
    db: AsyncSession,
    setting_key: str,
    setting_value: str,
    setting_metadata: Optional[dict] = None,
) -> dict[str, Any]:
    setting_key = (setting_key or "").strip()
    if not setting_key:
        raise ValidationFailed("Setting key is required")

    metadata = _validate_admin_setting(setting_key, setting_value, setting_metadata)

    result = await db.execute(select(AdminSetting).where(AdminSetting.setting_key == setting_key))
    row = result.scalar_one_or_none()
    if row is None:
        row = AdminSetting(setting_key=setting_key)
        db.add(row)

    row.setting_value = setting_value
    row.setting_metadata = metadata
    await db.commit()

    logger.info(f"Admin setting {setting_key} = {setting_value} {metadata or ''}")
    return {
        "setting_key": row.setting_key,
        "setting_value": row.setting_value,
        "setting_metadata": row.setting_metadata,
    }


async def get_order_edit_policy(db: AsyncSession) -> dict[str, Any]:
    """Current order edit policy as ``{mode, minutes}``."""
    result = await db.execute(
        select(AdminSetting).where(AdminSetting.setting_key == ORDER_EDIT_MODE_KEY)
    )
    row = result.scalar_one_or_none()
    if row is None or row.setting_value not in ORDER_EDIT_MODES:
        return dict(DEFAULT_ORDER_EDIT_POLICY)

    minutes = (row.setting_metadata or {}).get("minutes", DEFAULT_ORDER_EDIT_POLICY["minutes"])
    return {"mode": row.setting_value, "minutes": int(minutes)}
