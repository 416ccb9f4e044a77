"""Pydantic request/response schemas for the Orders API.

These are external contracts, kept separate from the internal commands and
read models.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    address_id: str = Field(min_length=1)

    model_config = {"json_schema_extra": {"examples": [{"address_id": "addr-001"}]}}


class PaymentCallbackRequest(BaseModel):
    """The signed callback the gateway's checkout widget posts after payment."""

    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = ""


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(min_length=1)

    model_config = {"json_schema_extra": {"examples": [{"status": "DELIVERED"}]}}


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class _ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class AddressSchema(_ReadModel):
    id: str
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


class CouponSchema(_ReadModel):
    id: str
    code: str
    name: str


class CustomerSchema(_ReadModel):
    id: str
    email: str
    username: str


class SellerCustomerSchema(_ReadModel):
    id: str
    username: str


class ProductSchema(_ReadModel):
    id: str
    name: str
    price: float
    stock: int
    owner_id: str


class OrderLineSchema(_ReadModel):
    product_id: str
    unit_price: float
    quantity: int
    line_total: float
    product: ProductSchema | None = None


# ---------------------------------------------------------------------------
# Order responses
# ---------------------------------------------------------------------------
class CustomerOrderSchema(_ReadModel):
    id: str
    status: str
    order_price: float
    discounted_order_price: float
    currency: str
    payment_confirmed: bool
    created_at: datetime
    total_order_items: int
    items: list[OrderLineSchema]
    address: AddressSchema | None = None
    coupon: CouponSchema | None = None
    customer: CustomerSchema | None = None


class OrderDetailSchema(CustomerOrderSchema):
    payment_reference: str
    gateway_payment_ref: str | None = None
    receipt: str
    updated_at: datetime


class SellerOrderSchema(_ReadModel):
    id: str
    status: str
    order_price: float
    discounted_order_price: float
    currency: str
    payment_confirmed: bool
    created_at: datetime
    items: list[OrderLineSchema]
    seller_subtotal: float
    address: AddressSchema | None = None
    customer: SellerCustomerSchema | None = None


class _PageSchema(_ReadModel):
    total_orders: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
    next_page: int | None = None
    prev_page: int | None = None


class CustomerOrderPage(_PageSchema):
    orders: list[CustomerOrderSchema]


class SellerOrderPage(_PageSchema):
    orders: list[SellerOrderSchema]


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------
class ApiResponse(BaseModel):
    status_code: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True


class ErrorResponse(BaseModel):
    status_code: int
    message: str
    errors: dict[str, list[str]]
    success: bool = False
