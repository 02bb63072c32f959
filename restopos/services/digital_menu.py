"""
Digital Menu Service

Public, themeable menu pages addressed by ``/menu/<slug>``: slug
generation, activation, theme selection, and the data plus view model
the public page is rendered from.
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.core.config import get_settings
from restopos.core.exceptions import NotFound, ValidationFailed
from restopos.core.timeutils import utcnow
from restopos.models import AccountStatus, DigitalMenu, MenuThemeSelection, PosAccount
from restopos.schemas import DigitalMenuOut, PosSettingsOut, ThemeSelectionOut, dump
from restopos.services import accounts, menu
from restopos.services.layouts import get_layout
from restopos.services.themes import (
    COLOR_KEYS,
    DEFAULT_THEME,
    get_theme_by_id,
    get_theme_css_variables,
    normalize_color_key,
)

settings = get_settings()
logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: Optional[str]) -> str:
    """Lower-case, collapse non-alphanumerics to ``-``, trim; ``menu`` if nothing is left."""
    slug = _NON_ALNUM.sub("-", (name or "").lower()).strip("-")
    return slug or "menu"


def public_url(slug: str) -> str:
    return f"{settings.app_base_url.rstrip('/')}/menu/{slug}"


async def generate_menu_slug(db: AsyncSession, account_id: str, restaurant_name: str) -> str:
    """Slug for an account, suffixed ``-2``, ``-3``... when another account has it."""
    base = slugify(restaurant_name)
    candidate = base
    suffix = 1
    while True:
        result = await db.execute(
            select(DigitalMenu.pos_account_id).where(DigitalMenu.public_url_slug == candidate)
        )
        owner = result.scalar_one_or_none()
        if owner is None or owner == account_id:
            return candidate
        suffix += 1
        candidate = f"{base}-{suffix}"


async def _get_menu(db: AsyncSession, account_id: str) -> Optional[DigitalMenu]:
    result = await db.execute(select(DigitalMenu).where(DigitalMenu.pos_account_id == account_id))
    return result.scalar_one_or_none()


async def _get_active_theme(db: AsyncSession, account_id: str) -> Optional[MenuThemeSelection]:
    result = await db.execute(
        select(MenuThemeSelection)
        .where(MenuThemeSelection.pos_account_id == account_id, MenuThemeSelection.active.is_(True))
        .order_by(MenuThemeSelection.updated_at.desc())
    )
    return result.scalars().first()


async def initialize_digital_menu(
    db: AsyncSession, account_id: str, restaurant_name: Optional[str] = None
) -> dict[str, Any]:
    """Create the account's digital menu and default theme if missing."""
    account = await db.get(PosAccount, account_id)
    if account is None:
        raise NotFound("Account not found")

    digital_menu = await _get_menu(db, account_id)
    if digital_menu is None:
        slug = await generate_menu_slug(db, account_id, restaurant_name or account.restaurant_name)
        digital_menu = DigitalMenu(pos_account_id=account_id, public_url_slug=slug, is_active=True)
        db.add(digital_menu)
        logger.info(f"Digital menu /menu/{slug} created for {account_id}")

    if await _get_active_theme(db, account_id) is None:
        db.add(MenuThemeSelection(pos_account_id=account_id, theme_name=DEFAULT_THEME, active=True))

    await db.commit()
    return await get_digital_menu_settings(db, account_id)


async def get_digital_menu_settings(db: AsyncSession, account_id: str) -> dict[str, Any]:
    digital_menu = await _get_menu(db, account_id)
    return {
        "digital_menu": dump(DigitalMenuOut, digital_menu),
        "active_theme": dump(ThemeSelectionOut, await _get_active_theme(db, account_id)),
        "public_url": public_url(digital_menu.public_url_slug) if digital_menu else None,
    }


async def _require_menu(db: AsyncSession, account_id: str) -> DigitalMenu:
    digital_menu = await _get_menu(db, account_id)
    if digital_menu is None:
        raise NotFound("Digital menu has not been set up")
    return digital_menu


async def set_digital_menu_active(db: AsyncSession, account_id: str, is_active: bool) -> dict[str, Any]:
    digital_menu = await _require_menu(db, account_id)
    digital_menu.is_active = bool(is_active)
    await db.commit()
    logger.info(f"Digital menu of {account_id} {'activated' if is_active else 'deactivated'}")
    return dump(DigitalMenuOut, digital_menu)


def validate_custom_colors(custom_colors: Optional[dict]) -> Optional[dict]:
    if not custom_colors:
        return None
    cleaned = {}
    for key, value in custom_colors.items():
        normalized = normalize_color_key(key)
        if normalized not in COLOR_KEYS:
            raise ValidationFailed(f"Unknown colour '{key}'. Options: {list(COLOR_KEYS)}")
        if value:
            cleaned[normalized] = str(value).strip()
    return cleaned or None


async def update_menu_theme(
    db: AsyncSession, account_id: str, theme_name: str, custom_colors: Optional[dict] = None
) -> dict[str, Any]:
    """Make ``theme_name`` the single active theme of the account."""
    if get_theme_by_id(theme_name) is None:
        raise ValidationFailed(f"Unknown theme '{theme_name}'")
    colors = validate_custom_colors(custom_colors)

    await db.execute(
        update(MenuThemeSelection)
        .where(MenuThemeSelection.pos_account_id == account_id)
        .values(active=False)
    )

    result = await db.execute(
        select(MenuThemeSelection).where(
            MenuThemeSelection.pos_account_id == account_id,
            MenuThemeSelection.theme_name == theme_name,
        )
    )
    selection = result.scalars().first()
    if selection is None:
        selection = MenuThemeSelection(pos_account_id=account_id, theme_name=theme_name)
        db.add(selection)

    selection.active = True
    selection.custom_colors = colors
    selection.updated_at = utcnow()
    await db.commit()

    logger.info(f"Theme of {account_id} set to {theme_name}")
    return dump(ThemeSelectionOut, selection)


async def mark_qr_generated(db: AsyncSession, account_id: str) -> dict[str, Any]:
    digital_menu = await _require_menu(db, account_id)
    digital_menu.qr_code_generated = True
    digital_menu.last_generated_at = utcnow()
    await db.commit()
    return dump(DigitalMenuOut, digital_menu)


# =============================================================================
# PUBLIC MENU
# =============================================================================

async def get_public_menu(db: AsyncSession, slug: str) -> dict[str, Any]:
    """
    Everything the public page shows.

    Raises:
        NotFound: unknown slug, or the menu is switched off, or its account
            is disabled or out of license
    """
    result = await db.execute(select(DigitalMenu).where(DigitalMenu.public_url_slug == slug))
    digital_menu = result.scalar_one_or_none()
    if digital_menu is None:
        raise NotFound("Menu not found")

    account = await accounts.load_account(db, digital_menu.pos_account_id)
    if (
        not digital_menu.is_active
        or account.status != AccountStatus.ACTIVE
        or not accounts.is_license_valid(account)
    ):
        raise NotFound("This menu is currently unavailable")

    theme = await _get_active_theme(db, account.id)
    restaurant = dump(PosSettingsOut, account.settings) or {
        "restaurant_name": account.restaurant_name,
        "tax_rate": 0.0,
        "gst_inclusive": True,
    }
    # Internal flag; not part of the public payload
    restaurant.pop("privacy_mode", None)

    return {
        "menu_items": await menu.list_menu_items(db, account.id),
        "settings": restaurant,
        "theme": dump(ThemeSelectionOut, theme) or {"theme_name": DEFAULT_THEME, "custom_colors": None},
        "digital_menu": {"is_active": digital_menu.is_active, "public_url_slug": slug},
    }


def format_price(price: float) -> str:
    """Whole rupees, halves rounded up: ``12.5`` -> ``₹13``."""
    rupees = Decimal(str(price)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{settings.currency_symbol}{rupees}"


def format_rate(rate: float) -> str:
    """``5.0`` -> ``5``, ``2.5`` -> ``2.5``."""
    return f"{float(rate):g}"


def build_public_menu_page(
    data: dict[str, Any], search: Optional[str] = None, category: Optional[str] = None
) -> dict[str, Any]:
    """
    View model of the public page: filtered, grouped items and the
    layout plan for the active theme.
    """
    items = data["menu_items"]
    restaurant = data["settings"]
    theme = get_theme_by_id(data["theme"].get("theme_name")) or get_theme_by_id(DEFAULT_THEME)

    categories = ["All"]
    for item in items:
        if item["category"] not in categories:
            categories.append(item["category"])

    selected = category if category in categories else "All"
    needle = (search or "").strip().lower()
    filtered = [
        item for item in items
        if (selected == "All" or item["category"] == selected) and needle in item["name"].lower()
    ]

    groups: dict[str, list] = {}
    for item in filtered:
        groups.setdefault(item["category"], []).append({**item, "price_label": format_price(item["price"])})

    tax_rate = float(restaurant.get("tax_rate") or 0)
    gst_inclusive = bool(restaurant.get("gst_inclusive"))
    layout = get_layout(theme, show_gst_badge=gst_inclusive and tax_rate > 0)

    return {
        "restaurant": restaurant,
        "theme": theme.to_dict(),
        "css_variables": get_theme_css_variables(theme, data["theme"].get("custom_colors")),
        "categories": categories,
        "selected_category": selected,
        "search": search or "",
        "sections": [
            {"category": name, "plan": layout.plan(group_items)} for name, group_items in groups.items()
        ],
        "gst_note": (
            f"* Prices are exclusive of {format_rate(tax_rate)}% GST"
            if not gst_inclusive and tax_rate > 0 else None
        ),
        "fssai_number": restaurant.get("fssai_number"),
    }
