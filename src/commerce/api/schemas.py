"""Pydantic request/response schemas for the Commerce API.

These are external contracts, kept apart from the Protean commands they are
translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    address: str
    city: str
    postal_code: str
    country: str


class TotalsSchema(BaseModel):
    subtotal: float
    discount: float
    shipping: float
    tax: float
    total: float


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    initial_stock: int = Field(ge=0, default=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoe",
                    "price": 20.0,
                    "initial_stock": 5,
                }
            ]
        }
    }


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    id: str
    name: str
    price: float
    stock: int
    total_sales: int
    is_active: bool


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(min_length=1)


class CartLineSchema(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    unit_price: float
    stock: int
    available: bool


class CartCouponSchema(BaseModel):
    code: str
    discount_percentage: float
    expiry_date: datetime | None = None


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartLineSchema]
    coupon: CartCouponSchema | None = None
    totals: TotalsSchema


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: AddressSchema | None = None
    payment_method: str | None = None
    notes: str | None = None
    # Client-side figures; recomputed server side
    items_price: float | None = None
    shipping_price: float | None = None
    tax_price: float | None = None
    total_price: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "address": "1 Main St",
                        "city": "Springfield",
                        "postal_code": "12345",
                        "country": "US",
                    },
                    "payment_method": "PayPal",
                }
            ]
        }
    }


class PayerSchema(BaseModel):
    email_address: str | None = None


class PayOrderRequest(BaseModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    payer: PayerSchema | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    reason: str | None = None


class OrderItemSchema(BaseModel):
    product_id: str
    name: str
    quantity: int
    unit_price: float


class PaymentResultSchema(BaseModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    items: list[OrderItemSchema]
    shipping_address: AddressSchema | None = None
    payment_method: str | None = None
    items_price: float
    discount_price: float
    shipping_price: float
    tax_price: float
    total_price: float
    coupon_code: str | None = None
    notes: str | None = None
    status: str
    is_paid: bool
    paid_at: datetime | None = None
    payment_result: PaymentResultSchema | None = None
    is_shipped: bool
    shipped_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class OrderListResponse(BaseModel):
    count: int
    orders: list[OrderResponse]


class PageRef(BaseModel):
    page: int
    limit: int


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
    next: PageRef | None = None
    prev: PageRef | None = None


class PaginatedOrdersResponse(BaseModel):
    pagination: PaginationSchema
    orders: list[OrderResponse]


class StatusStatsSchema(BaseModel):
    status: str
    count: int
    total: float


class DailyStatsSchema(BaseModel):
    date: str
    count: int
    total: float


class OrderStatsResponse(BaseModel):
    total_orders: int
    total_revenue: float
    today_orders: int
    today_revenue: float
    order_status_stats: list[StatusStatsSchema]
    daily_orders: list[DailyStatsSchema]


class OrderIdResponse(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
class CreateCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    discount_percentage: float
    min_purchase: float = 0.0
    is_active: bool = True
    start_date: datetime | None = None
    expiry_date: datetime
    usage_limit: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "discount_percentage": 10,
                    "expiry_date": "2030-01-01T00:00:00Z",
                    "usage_limit": 100,
                }
            ]
        }
    }


class UpdateCouponRequest(BaseModel):
    code: str | None = None
    description: str | None = None
    discount_percentage: float | None = None
    min_purchase: float | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    expiry_date: datetime | None = None
    usage_limit: int | None = None
    unlimited: bool = False


class CouponIdResponse(BaseModel):
    coupon_id: str


class CouponResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    discount_percentage: float
    min_purchase: float
    is_active: bool
    start_date: datetime | None = None
    expiry_date: datetime
    usage_limit: int | None = None
    usage_count: int


class CouponListResponse(BaseModel):
    count: int
    coupons: list[CouponResponse]


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"
