"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the commerce engine's
validation rules and match the field names expected by the API's
Pydantic request schemas.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

ADMIN_ID = "admin-loadtest"


# ---------- Identity headers ----------


def new_customer_id() -> str:
    """Generate unique customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def customer_headers(customer_id: str) -> dict:
    return {"X-User-Id": customer_id, "X-User-Role": "customer"}


def admin_headers() -> dict:
    return {"X-User-Id": ADMIN_ID, "X-User-Role": "admin"}


# ---------- Catalogue ----------


def product_data(stock: int | None = None) -> dict:
    """Generate RegisterProductRequest payload."""
    word = fake.word().capitalize()
    adjective = random.choice(["Premium", "Classic", "Ultra", "Eco", "Smart", "Pro"])
    return {
        "name": f"{adjective} {word} {uuid.uuid4().hex[:4]}",
        "price": round(random.uniform(4.99, 149.99), 2),
        "initial_stock": stock if stock is not None else random.randint(50, 500),
    }


# ---------- Cart ----------


def cart_item_data(product_id: str) -> dict:
    return {"product_id": product_id, "quantity": random.randint(1, 3)}


# ---------- Coupons ----------


def coupon_code() -> str:
    return f"LT{uuid.uuid4().hex[:6].upper()}"


def coupon_data(usage_limit: int | None = None) -> dict:
    """Generate CreateCouponRequest payload valid from now for two weeks."""
    now = datetime.now(UTC)
    return {
        "code": coupon_code(),
        "description": fake.catch_phrase()[:200],
        "discount_percentage": random.choice([5, 10, 15, 20, 25]),
        "min_purchase": 0.0,
        "start_date": (now - timedelta(minutes=5)).isoformat(),
        "expiry_date": (now + timedelta(days=14)).isoformat(),
        "usage_limit": usage_limit,
    }


# ---------- Orders ----------


def shipping_address() -> dict:
    return {
        "address": fake.street_address()[:255],
        "city": fake.city()[:100],
        "postal_code": fake.zipcode()[:20],
        "country": "US",
    }


def checkout_data() -> dict:
    """Generate PlaceOrderRequest payload."""
    return {
        "shipping_address": shipping_address(),
        "payment_method": random.choice(["PayPal", "Card", "Stripe"]),
        "notes": fake.sentence()[:200] if random.random() < 0.3 else None,
    }


def payment_data() -> dict:
    """Generate PayOrderRequest payload as a payment provider would report it."""
    return {
        "id": f"PAY-{uuid.uuid4().hex[:12].upper()}",
        "status": "COMPLETED",
        "update_time": datetime.now(UTC).isoformat(),
        "payer": {"email_address": fake.email()},
    }


def cancellation_reason() -> str:
    return random.choice(
        [
            "Changed my mind",
            "Found a better price",
            "Ordered by mistake",
            "Delivery too slow",
        ]
    )
