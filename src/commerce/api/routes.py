"""FastAPI routes for the Commerce domain — products, carts, orders and coupons."""

from fastapi import APIRouter, Depends
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from commerce.api.dependencies import admin_actor, current_actor
from commerce.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    CartResponse,
    CouponIdResponse,
    CouponListResponse,
    CouponResponse,
    CreateCouponRequest,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    PaginatedOrdersResponse,
    PayOrderRequest,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RegisterProductRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateCouponRequest,
    UpdateOrderStatusRequest,
)
from commerce.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from commerce.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from commerce.cart.management import cart_summary, get_cart
from commerce.catalogue.lookup import load_product
from commerce.catalogue.registration import RegisterProduct
from commerce.coupon.coupon import Coupon
from commerce.coupon.lookup import coupon_details, list_coupons
from commerce.coupon.management import CreateCoupon, DeleteCoupon, UpdateCoupon
from commerce.order.access import Actor
from commerce.order.cancellation import DeleteOrder, cancel_order
from commerce.order.creation import place_order
from commerce.order.fulfillment import DeliverOrder, MarkOrderProcessing, ShipOrder
from commerce.order.order import OrderStatus
from commerce.order.payment import MarkOrderPaid
from commerce.order.queries import list_orders, order_details, order_for_actor, order_stats, orders_for_customer

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])

_STATUS_COMMANDS = {
    OrderStatus.PROCESSING.value: MarkOrderProcessing,
    OrderStatus.SHIPPED.value: ShipOrder,
    OrderStatus.DELIVERED.value: DeliverOrder,
}


# ---------------------------------------------------------------------------
# Products (catalogue stand-in)
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest, actor: Actor = Depends(admin_actor)) -> ProductIdResponse:
    command = RegisterProduct(
        name=body.name,
        price=body.price,
        initial_stock=body.initial_stock,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = load_product(product_id)
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=product.price,
        stock=product.stock,
        total_sales=product.total_sales,
        is_active=product.is_active,
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
def _cart_response(customer_id) -> CartResponse:
    return CartResponse(**cart_summary(get_cart(customer_id)))


@cart_router.get("", response_model=CartResponse)
async def view_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    return _cart_response(actor.user_id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    command = AddToCart(
        customer_id=actor.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(actor.user_id)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartQuantityRequest, actor: Actor = Depends(current_actor)
) -> CartResponse:
    command = UpdateCartQuantity(
        customer_id=actor.user_id,
        product_id=product_id,
        new_quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(actor.user_id)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, actor: Actor = Depends(current_actor)) -> CartResponse:
    current_domain.process(RemoveFromCart(customer_id=actor.user_id, product_id=product_id), asynchronous=False)
    return _cart_response(actor.user_id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    current_domain.process(ClearCart(customer_id=actor.user_id), asynchronous=False)
    return _cart_response(actor.user_id)


@cart_router.post("/coupon", response_model=CartResponse)
async def apply_cart_coupon(body: ApplyCouponRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    command = ApplyCouponToCart(
        customer_id=actor.user_id,
        coupon_code=body.coupon_code,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(actor.user_id)


@cart_router.delete("/coupon", response_model=CartResponse)
async def remove_cart_coupon(actor: Actor = Depends(current_actor)) -> CartResponse:
    current_domain.process(RemoveCouponFromCart(customer_id=actor.user_id), asynchronous=False)
    return _cart_response(actor.user_id)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: PlaceOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order_id = place_order(
        customer_id=actor.user_id,
        shipping_address=body.shipping_address.model_dump() if body.shipping_address else None,
        payment_method=body.payment_method,
        notes=body.notes,
        items_price=body.items_price,
        shipping_price=body.shipping_price,
        tax_price=body.tax_price,
        total_price=body.total_price,
    )
    return OrderResponse(**order_details(order_for_actor(order_id, actor)))


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(actor: Actor = Depends(current_actor)) -> OrderListResponse:
    orders = [OrderResponse(**order_details(order)) for order in orders_for_customer(actor.user_id)]
    return OrderListResponse(count=len(orders), orders=orders)


@order_router.get("/stats", response_model=OrderStatsResponse)
async def get_order_stats(actor: Actor = Depends(admin_actor)) -> OrderStatsResponse:
    return OrderStatsResponse(**order_stats(actor))


@order_router.get("", response_model=PaginatedOrdersResponse)
async def get_orders(
    status: str | None = None,
    page: int = 1,
    limit: int = 10,
    actor: Actor = Depends(admin_actor),
) -> PaginatedOrdersResponse:
    result = list_orders(actor, status=status, page=page, limit=limit)
    return PaginatedOrdersResponse(
        pagination=result["pagination"],
        orders=[OrderResponse(**order_details(order)) for order in result["orders"]],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return OrderResponse(**order_details(order_for_actor(order_id, actor)))


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(order_id: str, body: PayOrderRequest, actor: Actor = Depends(current_actor)) -> OrderResponse:
    command = MarkOrderPaid(
        order_id=order_id,
        payment_id=body.id,
        status=body.status,
        update_time=body.update_time,
        email_address=body.payer.email_address if body.payer else None,
        actor_id=actor.user_id,
        actor_role=actor.role,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(**order_details(order_for_actor(order_id, actor)))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, actor: Actor = Depends(current_actor)
) -> OrderResponse:
    if body.status == OrderStatus.CANCELLED.value:
        cancel_order(order_id, reason=body.reason, actor_id=actor.user_id, actor_role=actor.role)
    elif body.status in _STATUS_COMMANDS:
        command = _STATUS_COMMANDS[body.status](order_id=order_id, actor_id=actor.user_id, actor_role=actor.role)
        current_domain.process(command, asynchronous=False)
    else:
        raise ValidationError(
            {"status": [f"Status must be one of: {', '.join(s.value for s in OrderStatus if s != OrderStatus.PENDING)}"]}
        )
    return OrderResponse(**order_details(order_for_actor(order_id, actor)))


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, actor: Actor = Depends(admin_actor)) -> StatusResponse:
    current_domain.process(
        DeleteOrder(order_id=order_id, actor_id=actor.user_id, actor_role=actor.role),
        asynchronous=False,
    )
    return StatusResponse()


# ---------------------------------------------------------------------------
# Coupons (admin)
# ---------------------------------------------------------------------------
@coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_coupon(body: CreateCouponRequest, actor: Actor = Depends(admin_actor)) -> CouponIdResponse:
    command = CreateCoupon(
        code=body.code,
        description=body.description,
        discount_percentage=body.discount_percentage,
        min_purchase=body.min_purchase,
        is_active=body.is_active,
        start_date=body.start_date,
        expiry_date=body.expiry_date,
        usage_limit=body.usage_limit,
    )
    result = current_domain.process(command, asynchronous=False)
    return CouponIdResponse(coupon_id=result)


@coupon_router.get("", response_model=CouponListResponse)
async def get_coupons(actor: Actor = Depends(admin_actor)) -> CouponListResponse:
    coupons = [CouponResponse(**coupon_details(coupon)) for coupon in list_coupons()]
    return CouponListResponse(count=len(coupons), coupons=coupons)


@coupon_router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(coupon_id: str, actor: Actor = Depends(admin_actor)) -> CouponResponse:
    coupon = current_domain.repository_for(Coupon).get(coupon_id)
    return CouponResponse(**coupon_details(coupon))


@coupon_router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: str, body: UpdateCouponRequest, actor: Actor = Depends(admin_actor)
) -> CouponResponse:
    command = UpdateCoupon(
        coupon_id=coupon_id,
        code=body.code,
        description=body.description,
        discount_percentage=body.discount_percentage,
        min_purchase=body.min_purchase,
        is_active=body.is_active,
        start_date=body.start_date,
        expiry_date=body.expiry_date,
        usage_limit=body.usage_limit,
        clear_usage_limit=body.unlimited,
    )
    current_domain.process(command, asynchronous=False)
    coupon = current_domain.repository_for(Coupon).get(coupon_id)
    return CouponResponse(**coupon_details(coupon))


@coupon_router.delete("/{coupon_id}", response_model=StatusResponse)
async def delete_coupon(coupon_id: str, actor: Actor = Depends(admin_actor)) -> StatusResponse:
    current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
    return StatusResponse()
