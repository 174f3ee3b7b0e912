"""Order queries for customers and administrators."""

import math
from collections import defaultdict
from datetime import timedelta

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from commerce.order.access import ensure_admin, ensure_can_access
from commerce.order.order import Order, OrderStatus
from commerce.utils.clock import as_utc, utcnow

_PAGE_SIZE = 100


def _fetch_all(queryset):
    """Read every match, page by page, past the query's default row limit."""
    orders = []
    offset = 0
    while True:
        page = queryset.offset(offset).limit(_PAGE_SIZE).all()
        orders.extend(page.items)
        if len(page.items) < _PAGE_SIZE:
            return orders
        offset += _PAGE_SIZE


def _newest_first(orders):
    return sorted(orders, key=lambda o: as_utc(o.created_at), reverse=True)


def orders_for_customer(customer_id):
    """A customer's orders, newest first."""
    query = current_domain.repository_for(Order)._dao.query.filter(customer_id=str(customer_id))
    return _newest_first(_fetch_all(query))


def order_for_actor(order_id, actor):
    order = current_domain.repository_for(Order).get(str(order_id))
    ensure_can_access(order, actor)
    return order


def list_orders(actor, status=None, page=1, limit=10):
    """All orders, newest first, optionally filtered by status. Admin only."""
    ensure_admin(actor)
    page = max(1, page)
    limit = max(1, limit)

    query = current_domain.repository_for(Order)._dao.query
    if status:
        if status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Status must be one of: {', '.join(s.value for s in OrderStatus)}"]})
        query = query.filter(status=status)
    orders = _newest_first(_fetch_all(query))

    total = len(orders)
    start = (page - 1) * limit
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }
    if start + limit < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}

    return {"orders": orders[start : start + limit], "pagination": pagination}


def order_stats(actor, now=None):
    """Dashboard figures: totals, today's totals, per-status and the last 7 days. Admin only."""
    ensure_admin(actor)
    now = as_utc(now) or utcnow()
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = start_of_today - timedelta(days=7)

    orders = _fetch_all(current_domain.repository_for(Order)._dao.query)

    by_status = defaultdict(lambda: {"count": 0, "total": 0.0})
    daily = defaultdict(lambda: {"count": 0, "total": 0.0})
    today_orders = 0
    today_revenue = 0.0
    for order in orders:
        amount = order.pricing.total_price if order.pricing else 0.0
        by_status[order.status]["count"] += 1
        by_status[order.status]["total"] += amount

        created_at = as_utc(order.created_at)
        if created_at >= start_of_today:
            today_orders += 1
            today_revenue += amount
        if created_at >= week_ago:
            day = daily[created_at.strftime("%Y-%m-%d")]
            day["count"] += 1
            day["total"] += amount

    return {
        "total_orders": len(orders),
        "total_revenue": round(sum(s["total"] for s in by_status.values()), 2),
        "today_orders": today_orders,
        "today_revenue": round(today_revenue, 2),
        "order_status_stats": [
            {"status": status, "count": s["count"], "total": round(s["total"], 2)}
            for status, s in sorted(by_status.items())
        ],
        "daily_orders": [
            {"date": date, "count": d["count"], "total": round(d["total"], 2)} for date, d in sorted(daily.items())
        ],
    }


def order_details(order):
    """Wire representation of an order."""
    pricing = order.pricing
    address = order.shipping_address
    payment = order.payment_result
    return {
        "id": str(order.id),
        "customer_id": str(order.customer_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in order.items
        ],
        "shipping_address": (
            {
                "address": address.address,
                "city": address.city,
                "postal_code": address.postal_code,
                "country": address.country,
            }
            if address
            else None
        ),
        "payment_method": order.payment_method,
        "items_price": pricing.items_price if pricing else 0.0,
        "discount_price": pricing.discount_price if pricing else 0.0,
        "shipping_price": pricing.shipping_price if pricing else 0.0,
        "tax_price": pricing.tax_price if pricing else 0.0,
        "total_price": pricing.total_price if pricing else 0.0,
        "coupon_code": order.coupon_code,
        "notes": order.notes,
        "status": order.status,
        "is_paid": order.is_paid,
        "paid_at": order.paid_at,
        "payment_result": (
            {
                "id": payment.payment_id,
                "status": payment.status,
                "update_time": payment.update_time,
                "email_address": payment.email_address,
            }
            if payment
            else None
        ),
        "is_shipped": order.is_shipped,
        "shipped_at": order.shipped_at,
        "is_delivered": order.is_delivered,
        "delivered_at": order.delivered_at,
        "cancelled_at": order.cancelled_at,
        "cancellation_reason": order.cancellation_reason,
        "created_at": order.created_at,
    }
