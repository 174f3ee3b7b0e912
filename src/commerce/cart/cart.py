"""Shopping Cart aggregate — one per customer, converted into an Order at checkout.

The cart's identity is the customer's identity, so a customer can never hold
two carts. Lines are keyed by product. Stock is checked when lines change but
never reserved; reservation happens only when an order is placed.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from commerce.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from commerce.coupon.validator import validate_coupon
from commerce.domain import commerce
from commerce.exceptions import CouponRejectedError, InsufficientStockError
from commerce.utils.clock import utcnow


@commerce.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@commerce.value_object(part_of="ShoppingCart")
class CouponSnapshot:
    """Coupon terms copied onto the cart when the coupon was applied.

    Checkout re-validates against the live coupon, found by ``coupon_id`` so a
    rename after applying still reaches it; the snapshot only decides the
    discount shown while shopping.
    """

    coupon_id = Identifier()
    code = String(required=True, max_length=50)
    discount_percentage = Float(required=True)
    expiry_date = DateTime()


@commerce.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    coupon = ValueObject(CouponSnapshot)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = utcnow()
        return cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            created_at=now,
            updated_at=now,
        )

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, available_stock):
        """Add ``quantity`` of a product, merging into an existing line.

        The merged quantity must fit in ``available_stock``.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        merged_quantity = quantity + (existing.quantity if existing else 0)
        if merged_quantity > available_stock:
            raise InsufficientStockError(str(product_id), merged_quantity, available_stock)

        now = utcnow()
        if existing:
            existing.quantity = merged_quantity
        else:
            self.add_items(CartItem(product_id=str(product_id), quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=merged_quantity,
            )
        )

    def update_item_quantity(self, product_id, new_quantity, available_stock):
        """Replace the quantity of an existing line."""
        if new_quantity is None or new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": [f"Product {product_id} is not in the cart"]})

        if new_quantity > available_stock:
            raise InsufficientStockError(str(product_id), new_quantity, available_stock)

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = utcnow()

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product's line. Removing an absent product does nothing."""
        item = self.line_for(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = utcnow()
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self, order_id=None):
        """Empty the cart and drop its coupon."""
        for item in list(self.items):
            self.remove_items(item)
        self.coupon = None
        self.updated_at = utcnow()
        self.raise_(CartCleared(cart_id=str(self.id), order_id=order_id))

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, terms, subtotal, now=None):
        """Validate ``terms`` against ``subtotal`` and keep a snapshot on success.

        A rejected coupon leaves any previously applied snapshot in place.
        """
        check = validate_coupon(terms, subtotal, now=now)
        if not check.valid:
            raise CouponRejectedError(terms.code, check.reason)

        self.coupon = CouponSnapshot(
            coupon_id=terms.coupon_id,
            code=terms.code,
            discount_percentage=terms.discount_percentage,
            expiry_date=terms.expiry_date,
        )
        self.updated_at = utcnow()

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                coupon_code=terms.code,
                discount_percentage=terms.discount_percentage,
            )
        )

    def remove_coupon(self):
        if self.coupon is None:
            return

        code = self.coupon.code
        self.coupon = None
        self.updated_at = utcnow()
        self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=code))
