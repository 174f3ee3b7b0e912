"""Checkout — converts a customer's cart into a placed order.

The order, the stock ledger and the coupon ledger are separate stores, so
checkout runs as a compensating sequence rather than a single transaction:

    1. validate the cart, address and payment method
    2. price the cart at live product prices and re-validate its coupon
    3. reserve stock line by line (release this order's reservations on failure)
    4. claim the coupon (release all reservations on failure)
    5. persist the order and clear the cart (undo 3 and 4 on failure)

Amounts sent by the caller are never trusted; the calculator decides.
"""

import json
from uuid import uuid4

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart
from commerce.cart.management import load_or_create_cart
from commerce.catalogue.lookup import load_product
from commerce.coupon.lookup import coupon_for_cart, coupon_terms
from commerce.coupon.validator import validate_coupon
from commerce.domain import commerce
from commerce.exceptions import CouponRejectedError
from commerce.order.order import Order, OrderPricing
from commerce.order.stock import claim_coupon, compensate_checkout, release_order_stock, reserve_order_stock
from commerce.pricing.calculator import PricedLine, calculate_totals

logger = structlog.get_logger(__name__)

_CLAIMED_AMOUNT_FIELDS = {
    "items_price": "subtotal",
    "shipping_price": "shipping",
    "tax_price": "tax",
    "total_price": "total",
}


@commerce.command(part_of="Order")
class PlaceOrder:
    order_id = Identifier()  # Optional: pre-assigned by place_order()
    customer_id = Identifier(required=True)
    shipping_address = Text()  # JSON: {address, city, postal_code, country}
    payment_method = String(max_length=50)
    notes = Text()
    # Amounts the client computed; compared against ours and otherwise ignored
    items_price = Float()
    shipping_price = Float()
    tax_price = Float()
    total_price = Float()


def _parse_shipping_address(raw):
    if not raw:
        raise ValidationError({"shipping_address": ["Shipping address is required"]})
    try:
        address = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        raise ValidationError({"shipping_address": ["Shipping address is not valid JSON"]}) from None
    if not isinstance(address, dict) or not address:
        raise ValidationError({"shipping_address": ["Shipping address is required"]})
    return address


def _log_claimed_amount_mismatch(command, totals):
    for field_name, total_name in _CLAIMED_AMOUNT_FIELDS.items():
        claimed = getattr(command, field_name)
        computed = getattr(totals, total_name)
        if claimed is not None and abs(claimed - computed) >= 0.005:
            logger.warning(
                "client amount ignored",
                customer_id=str(command.customer_id),
                field=field_name,
                claimed=claimed,
                computed=computed,
            )


@commerce.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = load_or_create_cart(command.customer_id)
        if cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})

        shipping_address = _parse_shipping_address(command.shipping_address)
        if not command.payment_method:
            raise ValidationError({"payment_method": ["Payment method is required"]})

        lines = []
        for item in cart.items:
            product = load_product(item.product_id)
            lines.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": item.quantity,
                    "unit_price": product.price,
                }
            )
        priced = [PricedLine(line["unit_price"], line["quantity"]) for line in lines]

        coupon = None
        discount_percentage = None
        if cart.coupon:
            coupon = coupon_for_cart(cart.coupon)
            check = validate_coupon(coupon_terms(coupon), calculate_totals(priced).subtotal)
            if not check.valid:
                logger.warning(
                    "coupon rejected at checkout",
                    customer_id=str(command.customer_id),
                    code=coupon.code,
                    reason=check.reason,
                )
                raise CouponRejectedError(coupon.code, check.reason)
            discount_percentage = coupon.discount_percentage

        totals = calculate_totals(priced, discount_percentage=discount_percentage).rounded()
        _log_claimed_amount_mismatch(command, totals)

        order = Order.place(
            customer_id=command.customer_id,
            lines=lines,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            pricing=OrderPricing(
                items_price=totals.subtotal,
                discount_price=totals.discount,
                shipping_price=totals.shipping,
                tax_price=totals.tax,
                total_price=totals.total,
            ),
            coupon_code=coupon.code if coupon else None,
            coupon_id=str(coupon.id) if coupon else None,
            notes=command.notes,
            order_id=command.order_id,
        )
        order_id = str(order.id)
        product_ids = [line["product_id"] for line in lines]

        reserve_order_stock(order_id, [(line["product_id"], line["quantity"]) for line in lines])

        if coupon is not None:
            try:
                claim_coupon(order_id, coupon)
            except CouponRejectedError as exc:
                logger.warning("coupon claim failed", order_id=order_id, code=exc.code, reason=exc.reason)
                release_order_stock(order_id, product_ids)
                raise
            except Exception:
                release_order_stock(order_id, product_ids)
                raise

        try:
            current_domain.repository_for(Order).add(order)
            cart.clear(order_id=order_id)
            current_domain.repository_for(ShoppingCart).add(cart)
        except Exception:
            compensate_checkout(order_id, product_ids, order.coupon_id)
            raise

        logger.info(
            "order placed",
            order_id=order_id,
            customer_id=str(command.customer_id),
            total=totals.total,
            coupon=order.coupon_code,
        )
        return order_id


def place_order(customer_id, shipping_address, payment_method, notes=None, **claimed_amounts):
    """Run checkout for a customer and return the new order id.

    The handler's changes are committed after it returns; if that commit
    fails, this order's reservations and coupon claim are undone here.
    ``claimed_amounts`` takes the client's ``items_price``, ``shipping_price``,
    ``tax_price`` and ``total_price``.
    """
    order_id = str(uuid4())
    cart = load_or_create_cart(customer_id)
    product_ids = [str(item.product_id) for item in cart.items]
    coupon_id = cart.coupon.coupon_id if cart.coupon else None

    if isinstance(shipping_address, dict):
        shipping_address = json.dumps(shipping_address)

    try:
        return current_domain.process(
            PlaceOrder(
                order_id=order_id,
                customer_id=customer_id,
                shipping_address=shipping_address,
                payment_method=payment_method,
                notes=notes,
                **claimed_amounts,
            ),
            asynchronous=False,
        )
    except Exception:
        compensate_checkout(order_id, product_ids, coupon_id)
        raise
