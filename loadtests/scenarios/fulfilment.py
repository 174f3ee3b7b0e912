"""Admin fulfilment load test scenarios.

Places an order as a customer, then walks it through processing,
shipping and delivery as an admin, checking the dashboard on the way.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_headers,
    cart_item_data,
    checkout_data,
    customer_headers,
    new_customer_id,
    payment_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState
from loadtests.scenarios.shopping import register_product


class OrderFulfilmentJourney(SequentialTaskSet):
    """Checkout -> Pay -> Processing -> Shipped -> Delivered -> Stats."""

    def on_start(self):
        self.state = OrderState(customer_id=new_customer_id())
        self.headers = customer_headers(self.state.customer_id)
        self.product_id = register_product(self.client)
        if self.product_id is None:
            self.interrupt()

    @task
    def checkout(self):
        self.client.post(
            "/cart/items",
            json=cart_item_data(self.product_id),
            headers=self.headers,
            name="POST /cart/items",
        )
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def pay(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/pay",
            json=payment_data(),
            headers=self.headers,
            catch_response=True,
            name="PUT /orders/{id}/pay",
        ) as resp:
            if resp.status_code == 200:
                self.state.is_paid = True
            else:
                resp.failure(f"Pay failed: {resp.status_code} — {extract_error_detail(resp)}")

    def _advance(self, status):
        with self.client.put(
            f"/orders/{self.state.order_id}/status",
            json={"status": status},
            headers=admin_headers(),
            catch_response=True,
            name=f"PUT /orders/{{id}}/status [{status}]",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def mark_processing(self):
        self._advance("processing")

    @task
    def ship(self):
        self._advance("shipped")

    @task
    def deliver(self):
        self._advance("delivered")

    @task
    def dashboard(self):
        self.client.get("/orders/stats", headers=admin_headers(), name="GET /orders/stats")
        self.client.get("/orders?limit=20", headers=admin_headers(), name="GET /orders")

    @task
    def done(self):
        self.interrupt()


class FulfilmentUser(HttpUser):
    wait_time = between(1, 3)
    tasks = [OrderFulfilmentJourney]
