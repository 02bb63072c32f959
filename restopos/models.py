"""
SQLAlchemy Database Models

Multi-tenant POS schema:
- Super-admin users and global admin settings
- POS accounts with settings, subscription (license) and telemetry
- Menu categories and items
- Orders with their line items
- Digital menus and their themes
- Login sessions
"""

import enum
import uuid

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    DateTime,
    Text,
    Enum,
    Boolean,
    JSON,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from restopos.database import Base
from restopos.core.timeutils import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class AccountStatus(str, enum.Enum):
    """Whether a POS account may log in."""
    ACTIVE = "active"
    DISABLED = "disabled"


class PaymentMethod(str, enum.Enum):
    """Payment methods accepted at the till."""
    CASH = "cash"
    UPI = "upi"
    CARD = "card"


class SessionKind(str, enum.Enum):
    """Who a login session belongs to."""
    POS = "pos"
    ADMIN = "admin"


# =============================================================================
# SUPER-ADMIN
# =============================================================================

class AdminUser(Base):
    """Super-admin who manages POS accounts."""
    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<AdminUser {self.username}>"


class AdminSetting(Base):
    """Global key/value setting owned by the super-admin (e.g. order_edit_mode)."""
    __tablename__ = "admin_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    setting_key = Column(String(100), nullable=False, unique=True, index=True)
    setting_value = Column(String(255), nullable=False)
    setting_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# =============================================================================
# POS ACCOUNTS
# =============================================================================

class PosAccount(Base):
    """
    A restaurant tenant.

    Logs in with its mobile number and an 8-digit PIN; everything else in
    the schema hangs off this row.
    """
    __tablename__ = "pos_accounts"

    id = Column(String(36), primary_key=True, default=new_id)
    mobile_number = Column(String(10), nullable=False, unique=True, index=True)
    pin_hash = Column(String(255), nullable=False)
    restaurant_name = Column(String(150), nullable=False)
    status = Column(
        Enum(AccountStatus),
        default=AccountStatus.ACTIVE,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    settings = relationship(
        "PosSettings", back_populates="account", uselist=False, cascade="all, delete-orphan"
    )
    subscriptions = relationship(
        "PosSubscription", back_populates="account", cascade="all, delete-orphan"
    )
    telemetry = relationship(
        "PosTelemetry", back_populates="account", uselist=False, cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<PosAccount {self.mobile_number} - {self.restaurant_name} - {self.status.value}>"


class PosSettings(Base):
    """Restaurant details printed on receipts and shown on the public menu."""
    __tablename__ = "pos_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    restaurant_name = Column(String(150), nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    fssai_number = Column(String(20), nullable=True)
    tax_rate = Column(Float, nullable=False, default=0.0)  # percent
    gst_inclusive = Column(Boolean, nullable=False, default=True)
    privacy_mode = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    account = relationship("PosAccount", back_populates="settings")


class PosSubscription(Base):
    """License window of an account. The latest ``valid_until`` wins."""
    __tablename__ = "pos_subscriptions"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default="active")
    valid_from = Column(DateTime(timezone=True), default=utcnow)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    account = relationship("PosAccount", back_populates="subscriptions")


class PosTelemetry(Base):
    """Running totals the admin console shows per account."""
    __tablename__ = "pos_telemetry"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    total_orders = Column(Integer, nullable=False, default=0)
    total_revenue = Column(Float, nullable=False, default=0.0)
    last_active = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    account = relationship("PosAccount", back_populates="telemetry")


# =============================================================================
# MENU
# =============================================================================

class PosCategory(Base):
    """Menu category; ``position`` keeps the order the owner chose."""
    __tablename__ = "pos_categories"
    __table_args__ = (
        UniqueConstraint("pos_account_id", "name", name="uq_category_account_name"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class MenuItem(Base):
    """A sellable item. ``image`` is a URL or a data URL."""
    __tablename__ = "pos_menu_items"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(150), nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String(100), nullable=False)
    image = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<MenuItem {self.name} - {self.price}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    A completed sale.

    ``total_amount`` is always the sum of the line totals; it is computed
    when the order is recorded and never trusted from the client.
    """
    __tablename__ = "pos_orders"
    __table_args__ = (
        UniqueConstraint("pos_account_id", "order_number", name="uq_order_account_number"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_number = Column(String(40), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    def __repr__(self):
        return f"<Order #{self.order_number} - {self.payment_method.value} - {self.total_amount}>"


class OrderItem(Base):
    """One line of an order, with the name and price frozen at sale time."""
    __tablename__ = "pos_order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(
        String(36), ForeignKey("pos_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    item_name = Column(String(150), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")


# =============================================================================
# DIGITAL MENU
# =============================================================================

class DigitalMenu(Base):
    """Public menu page of an account, reachable at ``/menu/<slug>``."""
    __tablename__ = "pos_digital_menus"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    public_url_slug = Column(String(120), nullable=False, unique=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    qr_code_generated = Column(Boolean, nullable=False, default=False)
    last_generated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class MenuThemeSelection(Base):
    """Theme chosen for a digital menu; at most one row per account is active."""
    __tablename__ = "pos_menu_themes"

    id = Column(String(36), primary_key=True, default=new_id)
    pos_account_id = Column(
        String(36), ForeignKey("pos_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    theme_name = Column(String(50), nullable=False)
    custom_colors = Column(JSON, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# =============================================================================
# AUTH SESSIONS
# =============================================================================

class AuthSession(Base):
    """Bearer token issued at login."""
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    kind = Column(Enum(SessionKind), nullable=False)
    subject_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
