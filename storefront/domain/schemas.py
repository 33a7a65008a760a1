# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


def _ensure_unique_sizes(sizes):
    seen = set()
    for entry in sizes:
        if entry.size in seen:
            raise ValueError(f"Rozmiar {entry.size} wystepuje wiecej niz raz")
        seen.add(entry.size)
    return sizes


# ---------- katalog ----------

class SizeStockIn(BaseModel):
    """Para {rozmiar, ilosc} budowana raz na granicy API."""

    size: int = Field(..., gt=0, description="Rozmiar buta")
    quantity: int = Field(..., ge=0, description="Stan magazynowy (>= 0)")


class ColorIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    code: str = Field(..., min_length=1, max_length=20)
    images: List[str] = Field(default_factory=list)


class ProductIn(BaseModel):
    """Schema dla tworzenia produktu (panel admina)."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    brand: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    discount_price: Optional[Decimal] = Field(None, ge=0)
    featured: bool = False
    sizes: List[SizeStockIn] = Field(default_factory=list)
    colors: List[ColorIn] = Field(default_factory=list)

    @field_validator("sizes")
    @classmethod
    def unique_sizes(cls, v):
        return _ensure_unique_sizes(v)


class SizesUpdateIn(BaseModel):
    sizes: List[SizeStockIn]

    @field_validator("sizes")
    @classmethod
    def unique_sizes(cls, v):
        return _ensure_unique_sizes(v)


class SizeStockOut(BaseModel):
    size: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class ColorOut(BaseModel):
    name: str
    code: str
    images: List[str]

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    category: str
    brand: str
    price: Decimal
    discount_price: Optional[Decimal] = None
    featured: bool
    sizes: List[SizeStockOut]
    colors: List[ColorOut]
    total_stock: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ColorSwatchOut(BaseModel):
    name: str
    code: str


class RelatedOut(BaseModel):
    related: List[ProductOut]
    similar: List[ProductOut]


class QuickviewOut(BaseModel):
    id: int
    name: str
    price: Decimal
    discount_price: Optional[Decimal] = None
    effective_price: Decimal
    images: List[str]
    stock: int
    sizes: List[int]
    colors: List[ColorSwatchOut]
    brand: str
    category: str


class StockOut(BaseModel):
    product_id: int
    size: int
    available: int


# ---------- koszyk ----------

class LineKeyIn(BaseModel):
    """Klucz pozycji koszyka: (produkt, rozmiar, kolor)."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    size: int = Field(..., gt=0)
    color: str = Field(..., min_length=1, max_length=50)


class ItemIn(LineKeyIn):
    """Schema dla dodawania produktu do koszyka."""

    quantity: int = Field(1, description="Ilość produktu")


class SetQuantityIn(LineKeyIn):
    quantity: int


class CartItemOut(BaseModel):
    """Schema dla pozycji w koszyku (response)."""

    product_id: int
    name: str
    size: int
    color: str
    quantity: int
    price: Decimal
    discounted_price: Optional[Decimal] = None
    unit_price: Decimal
    subtotal: Decimal
    image: str


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: Optional[int] = None
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    count: int

    model_config = ConfigDict(from_attributes=True)


class CartCountOut(BaseModel):
    count: int


# ---------- zamowienia ----------

class OrderItemOut(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int
    size: int
    color: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    user_id: int
    status: str
    payment_status: str
    total_amount: Decimal
    items: List[OrderItemOut]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusUpdateIn(BaseModel):
    status: str = Field(..., min_length=1)


# ---------- uzytkownicy ----------

class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")
    email: Optional[str] = Field(None, max_length=200)


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserDetailOut(BaseModel):
    user: UserRead
    orders: List[OrderOut]


# ---------- dashboard ----------

class ActivityOut(BaseModel):
    title: str
    description: str
    time: str


class DashboardStats(BaseModel):
    total_products: int = 0
    low_stock_items: int = 0
    total_orders: int = 0
    todays_orders: int = 0
    pending_orders: int = 0
    total_revenue: Decimal = Decimal("0.00")
    avg_order_value: Decimal = Decimal("0.00")
    total_users: int = 0
    new_users_today: int = 0
    recent_activities: List[ActivityOut] = Field(default_factory=list)
    generated_at: datetime


class StatsResponse(BaseModel):
    success: bool
    stats: Optional[DashboardStats] = None
    error: Optional[str] = None
    timestamp: datetime
