# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


# ---------------------------------------------------------------- users

class UserCreate(BaseModel):
    """Register a user. Credentials are handled by the identity layer."""

    email: EmailStr
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    is_admin: bool = False


class UserRead(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- products

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(..., ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock_quantity: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int
    image_url: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class CategoryList(BaseModel):
    categories: List[str]


# ---------------------------------------------------------------- cart

class CartItemIn(BaseModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class CartProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    image_url: Optional[str] = None
    stock_quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    line_total: Decimal
    product: CartProductOut


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    count: int


# ---------------------------------------------------------------- orders

class OrderCreate(BaseModel):
    shipping_address: str = Field(..., min_length=1)

    @field_validator("shipping_address")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("shipping_address must not be blank")
        return v.strip()


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price_at_purchase: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    shipping_address: str
    items: List[OrderItemOut]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderList(BaseModel):
    orders: List[OrderOut]


class OrderPage(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination
