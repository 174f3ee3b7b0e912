"""Contention scenarios for stock and coupon limits.

Many users race for one scarce product and one limited coupon. The
expected outcome is a burst of 201s up to the stock (or usage limit)
followed by 409s; a 5xx or an extra 201 means the ledgers oversold.
"""

import requests
from locust import HttpUser, constant_pacing, events, task

from loadtests.data_generators import admin_headers, checkout_data, coupon_data, customer_headers, new_customer_id
from loadtests.helpers.response import extract_error_detail

HOT_ITEM_STOCK = 100
HOT_COUPON_LIMIT = 50

_shared = {"product_id": None, "coupon_code": None}


@events.test_start.add_listener
def seed_hot_item(environment, **_kwargs):
    """Register the contended product and coupon once per test run."""
    if environment.host is None:
        return

    resp = requests.post(
        f"{environment.host}/products",
        json={"name": "Limited Edition", "price": 49.99, "initial_stock": HOT_ITEM_STOCK},
        headers=admin_headers(),
        timeout=10,
    )
    if resp.status_code == 201:
        _shared["product_id"] = resp.json()["product_id"]

    coupon = coupon_data(usage_limit=HOT_COUPON_LIMIT)
    resp = requests.post(f"{environment.host}/coupons", json=coupon, headers=admin_headers(), timeout=10)
    if resp.status_code == 201:
        _shared["coupon_code"] = coupon["code"]


class LastUnitRaceUser(HttpUser):
    """Every iteration is a fresh customer buying one unit of the hot item."""

    wait_time = constant_pacing(0.2)

    @task
    def race_for_last_unit(self):
        if _shared["product_id"] is None:
            return

        headers = customer_headers(new_customer_id())
        self.client.post(
            "/cart/items",
            json={"product_id": _shared["product_id"], "quantity": 1},
            headers=headers,
            name="[RACE] POST /cart/items",
        )
        if _shared["coupon_code"]:
            self.client.post(
                "/cart/coupon",
                json={"coupon_code": _shared["coupon_code"]},
                headers=headers,
                name="[RACE] POST /cart/coupon",
            )

        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=headers,
            catch_response=True,
            name="[RACE] POST /orders",
        ) as resp:
            # Losing the race is an expected outcome
            if resp.status_code in (201, 409):
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
