# supergains/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from supergains.utils.settings import MAX_ITEM_QUANTITY

InventoryStatus = Literal["active", "inactive", "discontinued", "out_of_stock"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
PaymentMethod = Literal["credit_card", "debit_card", "paypal", "cash", "bank_transfer"]


# =====================================================
# users / auth
# =====================================================
class UserRegister(BaseModel):
    """Schema for user registration."""

    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserStatusIn(BaseModel):
    active: bool


class TokenOut(BaseModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# =====================================================
# products
# =====================================================
class ProductCreate(BaseModel):
    """Schema for creating a product together with its inventory record."""

    name: str = Field(..., min_length=1, max_length=100)
    brand: Optional[str] = Field(None, max_length=50)
    price: Decimal = Field(..., ge=0, le=10000, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=500, pattern=r"^https?://.+")
    categories: List[str] = Field(default_factory=list, max_length=10)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    max_stock: int = Field(100, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    brand: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0, le=10000, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    image_url: Optional[str] = Field(None, max_length=500, pattern=r"^https?://.+")
    categories: Optional[List[str]] = Field(None, max_length=10)


class ProductOut(BaseModel):
    id: int
    name: str
    brand: str | None = None
    price: Decimal
    stock: int
    description: str | None = None
    image_url: str | None = None
    categories: List[str] = []
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    id: int
    name: str
    brand: str | None = None
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# inventory
# =====================================================
class StockQuantityIn(BaseModel):
    quantity: int = Field(..., gt=0, description="Must be greater than 0")
    notes: Optional[str] = Field(None, max_length=500)


class InventoryUpdate(BaseModel):
    min_stock: Optional[int] = Field(None, ge=0)
    max_stock: Optional[int] = Field(None, ge=0)
    status: Optional[InventoryStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class InventoryOut(BaseModel):
    id: int
    product_id: int
    product: ProductSummary | None = None
    current_stock: int
    reserved_stock: int
    available_stock: int
    min_stock: int
    max_stock: int
    total_sold: int
    status: str
    needs_restock: bool
    stock_status: str
    notes: str | None = None
    last_restocked: datetime | None = None
    last_sold: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class InventoryPage(BaseModel):
    items: List[InventoryOut]
    total: int
    page: int
    pages: int
    limit: int
    has_next: bool
    has_prev: bool


class InventoryStats(BaseModel):
    total_products: int
    total_stock: int
    total_reserved: int
    total_available: int
    total_sold: int
    average_stock: float
    status_breakdown: dict[str, int]
    low_stock: int
    out_of_stock: int


# =====================================================
# cart
# =====================================================
class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0, le=MAX_ITEM_QUANTITY)


class ItemQuantityIn(BaseModel):
    #0 removes the line, negatives are rejected in the service with a clear message
    quantity: int = Field(..., le=MAX_ITEM_QUANTITY)


class CartItemOut(BaseModel):
    product_id: int
    name: str | None = None
    quantity: int
    price: Decimal
    subtotal: Decimal


class CartOut(BaseModel):
    items: List[CartItemOut]
    total: Decimal
    item_count: int


# =====================================================
# orders
# =====================================================
class ShippingAddress(BaseModel):
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    zip_code: str = Field(..., min_length=1, max_length=10)
    country: str = Field(..., min_length=1, max_length=50)

    @field_validator("street", "city", "state", "zip_code", "country")
    @classmethod
    def strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OrderCreate(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=500)


class OrderStatusIn(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)


class PaymentStatusIn(BaseModel):
    payment_status: PaymentStatus


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    items: List[OrderItemOut]
    status: str
    payment_status: str
    payment_method: str
    shipping_address: ShippingAddress
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    notes: str | None = None
    processed_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    pages: int
    limit: int
    has_next: bool
    has_prev: bool


# =====================================================
# dashboard
# =====================================================
class DashboardSummary(BaseModel):
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    items_sold: int
    orders_by_status: dict[str, int]
    low_stock: int
    out_of_stock: int


class TopProduct(BaseModel):
    product_id: int
    product_name: str
    quantity_sold: int
    revenue: Decimal


class SalesPeriod(BaseModel):
    period: str
    orders: int
    revenue: Decimal
