"""Order aggregate — a placed, immutable purchase and its fulfilment lifecycle.

State machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED from PENDING, PROCESSING or SHIPPED

DELIVERED and CANCELLED are terminal. Payment is tracked separately by
``is_paid`` and does not move the status. Line prices and amounts are
captured at checkout and never recomputed.
"""

import json
from enum import Enum

from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from commerce.domain import commerce
from commerce.exceptions import OrderTransitionError
from commerce.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderProcessing,
    OrderShipped,
)
from commerce.utils.clock import utcnow


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@commerce.value_object(part_of="Order")
class ShippingAddress:
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@commerce.value_object(part_of="Order")
class OrderPricing:
    """Amounts charged for the order, exactly as computed at checkout."""

    items_price = Float(default=0.0)
    discount_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    total_price = Float(default=0.0)


@commerce.value_object(part_of="Order")
class PaymentResult:
    """Payment confirmation as reported by the payment provider. Stored verbatim."""

    payment_id = String(max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=254)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@commerce.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@commerce.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, max_length=50)
    pricing = ValueObject(OrderPricing)
    coupon_id = Identifier()
    coupon_code = String(max_length=50)
    notes = Text()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    payment_result = ValueObject(PaymentResult)
    is_shipped = Boolean(default=False)
    shipped_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        lines,
        shipping_address,
        payment_method,
        pricing,
        coupon_code=None,
        notes=None,
        order_id=None,
        coupon_id=None,
    ):
        """Create a pending, unpaid order.

        Args:
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, quantity, unit_price.
            shipping_address: Dict with address, city, postal_code, country.
            pricing: ``OrderPricing`` computed for ``lines``.
        """
        now = utcnow()
        values = {
            "customer_id": str(customer_id),
            "items": [OrderItem(**line) for line in lines],
            "shipping_address": ShippingAddress(**shipping_address),
            "payment_method": payment_method,
            "pricing": pricing,
            "coupon_id": str(coupon_id) if coupon_id else None,
            "coupon_code": coupon_code,
            "notes": notes,
            "status": OrderStatus.PENDING.value,
            "is_paid": False,
            "created_at": now,
            "updated_at": now,
        }
        if order_id:
            values["id"] = str(order_id)
        order = cls(**values)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "name": item.name,
                            "quantity": item.quantity,
                            "unit_price": item.unit_price,
                        }
                        for item in order.items
                    ]
                ),
                total_price=pricing.total_price,
                coupon_id=str(coupon_id) if coupon_id else None,
                coupon_code=coupon_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise OrderTransitionError(f"Cannot change order status from {current.value} to {target_status.value}")

    @property
    def is_cancelled(self):
        return OrderStatus(self.status) == OrderStatus.CANCELLED

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_paid(self, payment_id=None, status=None, update_time=None, email_address=None):
        """Record the payment result. An order is paid at most once."""
        if self.is_cancelled:
            raise OrderTransitionError("Cannot pay for a cancelled order")
        if self.is_paid:
            raise OrderTransitionError("Order is already paid")

        now = utcnow()
        self.is_paid = True
        self.paid_at = now
        self.payment_result = PaymentResult(
            payment_id=payment_id,
            status=status,
            update_time=update_time,
            email_address=email_address,
        )
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=payment_id,
                payment_status=status,
                amount=self.pricing.total_price,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def mark_processing(self):
        self._assert_can_transition(OrderStatus.PROCESSING)
        now = utcnow()
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now
        self.raise_(OrderProcessing(order_id=str(self.id), started_at=now))

    def ship(self):
        self._assert_can_transition(OrderStatus.SHIPPED)
        now = utcnow()
        self.status = OrderStatus.SHIPPED.value
        self.is_shipped = True
        self.shipped_at = now
        self.updated_at = now
        self.raise_(OrderShipped(order_id=str(self.id), shipped_at=now))

    def deliver(self):
        """Mark the order delivered. Only shipped orders can be delivered."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = utcnow()
        self.status = OrderStatus.DELIVERED.value
        self.is_delivered = True
        self.delivered_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason=None):
        """Cancel the order.

        Returns ``True`` when the order moved to cancelled and ``False`` when it
        already was, in which case nothing changes and no event is raised.
        """
        if self.is_cancelled:
            return False

        self._assert_can_transition(OrderStatus.CANCELLED)
        previous_status = self.status
        now = utcnow()
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.cancellation_reason = reason
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous_status,
                reason=reason,
                cancelled_at=now,
            )
        )
        return True
