"""Cart coupon management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart
from commerce.cart.management import cart_subtotal, load_or_create_cart
from commerce.coupon.lookup import coupon_terms, find_coupon_by_code
from commerce.domain import commerce
from commerce.exceptions import CouponRejectedError

logger = structlog.get_logger(__name__)


@commerce.command(part_of="ShoppingCart")
class ApplyCouponToCart:
    """Apply a coupon code to a customer's cart."""

    customer_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@commerce.command(part_of="ShoppingCart")
class RemoveCouponFromCart:
    customer_id = Identifier(required=True)


@commerce.command_handler(part_of=ShoppingCart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        coupon = find_coupon_by_code(command.coupon_code)
        cart = load_or_create_cart(command.customer_id)
        try:
            cart.apply_coupon(coupon_terms(coupon), cart_subtotal(cart))
        except CouponRejectedError as exc:
            logger.warning(
                "coupon rejected",
                customer_id=str(command.customer_id),
                code=exc.code,
                reason=exc.reason,
            )
            raise
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        cart = load_or_create_cart(command.customer_id)
        cart.remove_coupon()
        current_domain.repository_for(ShoppingCart).add(cart)
