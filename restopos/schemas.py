"""
Pydantic Schemas for Request/Response Validation

Request bodies of the JSON API and the read models services use to
serialize ORM rows. Business rules (PIN length, price > 0, ...) live in
the services so every caller gets the same messages; the schemas only
check shapes and types.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict
from datetime import datetime

from restopos.models import AccountStatus, PaymentMethod


# =============================================================================
# AUTH
# =============================================================================

class PosLoginRequest(BaseModel):
    """Mobile number + PIN login for a restaurant."""
    mobile_number: str = Field(..., examples=["9876543210"])
    pin: str = Field(..., examples=["12345678"])


class AdminLoginRequest(BaseModel):
    """Super-admin login."""
    username: str = Field(..., examples=["admin"])
    password: str = Field(..., examples=["change-me"])


# =============================================================================
# ACCOUNTS & SETTINGS
# =============================================================================

class PosAccountCreate(BaseModel):
    """Request schema for creating a POS account."""
    mobile_number: str = Field(..., examples=["9876543210"])
    pin: str = Field(..., examples=["12345678"])
    restaurant_name: str = Field(..., examples=["Spice Garden"])
    license_duration_days: Optional[int] = Field(None, examples=[365])

    @field_validator("mobile_number", "pin", "restaurant_name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()


class LicenseExtension(BaseModel):
    days: int = Field(..., examples=[365])


class PosSettingsUpdate(BaseModel):
    """Restaurant details shown on receipts and the public menu."""
    restaurant_name: str = Field(..., examples=["Spice Garden"])
    address: Optional[str] = Field(None, examples=["12 MG Road, Pune"])
    phone: Optional[str] = Field(None, examples=["020-5555-1234"])
    email: Optional[str] = Field(None, examples=["hello@spicegarden.in"])
    fssai_number: Optional[str] = Field(None, examples=["11521999000123"])
    tax_rate: float = Field(default=5.0, examples=[5.0])
    gst_inclusive: bool = Field(default=True)
    privacy_mode: bool = Field(default=False)


class AdminSettingUpdate(BaseModel):
    """Global admin setting such as ``order_edit_mode``."""
    setting_key: str = Field(..., examples=["order_edit_mode"])
    setting_value: str = Field(..., examples=["time_limited"])
    setting_metadata: Optional[Dict[str, Any]] = Field(None, examples=[{"minutes": 30}])


# =============================================================================
# MENU
# =============================================================================

class MenuItemUpsert(BaseModel):
    """Create a menu item, or update it when ``item_id`` is given."""
    name: str = Field(..., examples=["Paneer Tikka"])
    price: float = Field(..., examples=[240])
    category: str = Field(..., examples=["Starters"])
    image: Optional[str] = Field(None, description="Image URL or data URL")
    item_id: Optional[str] = Field(None)


class CategoriesUpdate(BaseModel):
    """Full, ordered category list of an account."""
    categories: List[str] = Field(..., examples=[["Starters", "Mains"]])


# =============================================================================
# ORDERS
# =============================================================================

class OrderLineCreate(BaseModel):
    """Single cart line in an order."""
    item_id: Optional[str] = Field(None)
    name: str = Field(..., min_length=1, max_length=150, examples=["Masala Dosa"])
    price: float = Field(..., ge=0, examples=[90])
    quantity: int = Field(..., ge=1, le=999, examples=[2])


class OrderCreate(BaseModel):
    """Request schema for recording a completed sale."""
    items: List[OrderLineCreate] = Field(default_factory=list)
    payment_method: str = Field(..., examples=["cash", "upi", "card"])
    order_number: Optional[str] = Field(None, max_length=40)
    total_amount: Optional[float] = Field(None, description="Client total, checked against the lines")


class PaymentMethodUpdate(BaseModel):
    """Change the payment method of a recorded order."""
    payment_method: str = Field(..., examples=["upi"])


# =============================================================================
# DIGITAL MENU
# =============================================================================

class DigitalMenuActiveUpdate(BaseModel):
    is_active: bool


class ThemeUpdate(BaseModel):
    """Pick a theme, optionally overriding some of its colours."""
    theme_name: str = Field(..., examples=["modern"])
    custom_colors: Optional[Dict[str, str]] = Field(None, examples=[{"primary": "#ff6600"}])


# =============================================================================
# READ MODELS
# =============================================================================

class PosAccountOut(BaseModel):
    id: str
    mobile_number: str
    restaurant_name: str
    status: AccountStatus
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class PosSettingsOut(BaseModel):
    restaurant_name: str
    address: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    fssai_number: Optional[str]
    tax_rate: float
    gst_inclusive: bool
    privacy_mode: bool

    class Config:
        from_attributes = True


class SubscriptionOut(BaseModel):
    status: str
    valid_from: Optional[datetime]
    valid_until: datetime

    class Config:
        from_attributes = True


class TelemetryOut(BaseModel):
    total_orders: int
    total_revenue: float
    last_active: Optional[datetime]

    class Config:
        from_attributes = True


class MenuItemOut(BaseModel):
    id: str
    name: str
    price: float
    category: str
    image: Optional[str]

    class Config:
        from_attributes = True


class OrderItemOut(BaseModel):
    item_name: str
    quantity: int
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: str
    order_number: str
    payment_method: PaymentMethod
    total_amount: float
    created_at: datetime
    updated_at: Optional[datetime]
    items: List[OrderItemOut]

    class Config:
        from_attributes = True


class DigitalMenuOut(BaseModel):
    public_url_slug: str
    is_active: bool
    qr_code_generated: bool
    last_generated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ThemeSelectionOut(BaseModel):
    theme_name: str
    custom_colors: Optional[Dict[str, str]]
    active: bool

    class Config:
        from_attributes = True


# =============================================================================
# HEALTH
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    timestamp: datetime


def dump(schema: type[BaseModel], obj: Any) -> Optional[dict]:
    """Serialize an ORM row through a read model into JSON-safe values."""
    if obj is None:
        return None
    return schema.model_validate(obj).model_dump(mode="json")
