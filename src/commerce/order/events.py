"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from commerce.domain import commerce


@commerce.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into a pending order with its stock reserved."""

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, name, quantity, unit_price}
    total_price = Float(required=True)
    coupon_id = Identifier()
    coupon_code = String()
    placed_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderPaid:
    order_id = Identifier(required=True)
    payment_id = String()
    payment_status = String()
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderProcessing:
    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderShipped:
    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderDelivered:
    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled; every line's reservation is to be released."""

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
