"""Shopper load test scenarios.

Stateful SequentialTaskSet journeys covering the cart, coupon and
checkout flows of a single customer.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_headers,
    cancellation_reason,
    cart_item_data,
    checkout_data,
    coupon_data,
    customer_headers,
    new_customer_id,
    payment_data,
    product_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


def register_product(client, stock=None):
    """Register a product as an admin and return its id, or None on failure."""
    with client.post(
        "/products",
        json=product_data(stock),
        headers=admin_headers(),
        catch_response=True,
        name="POST /products",
    ) as resp:
        if resp.status_code == 201:
            return resp.json()["product_id"]
        resp.failure(f"Register product failed: {resp.status_code} — {extract_error_detail(resp)}")
        return None


class BrowseAndAbandonJourney(SequentialTaskSet):
    """View Cart -> Add Items -> Update Quantity -> Remove Item -> Clear.

    Models a browsing customer who fills a cart, changes their mind,
    and leaves without checking out.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=new_customer_id())
        self.headers = customer_headers(self.state.customer_id)
        for _ in range(2):
            product_id = register_product(self.client)
            if product_id is None:
                self.interrupt()
            self.state.product_ids.append(product_id)

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def add_items(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/cart/items",
                json=cart_item_data(product_id),
                headers=self.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Add item failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def update_quantity(self):
        with self.client.put(
            f"/cart/items/{self.state.product_ids[0]}",
            json={"quantity": 4},
            headers=self.headers,
            catch_response=True,
            name="PUT /cart/items/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update quantity failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def remove_item(self):
        with self.client.delete(
            f"/cart/items/{self.state.product_ids[1]}",
            headers=self.headers,
            catch_response=True,
            name="DELETE /cart/items/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Remove item failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def clear_cart(self):
        with self.client.delete("/cart", headers=self.headers, catch_response=True, name="DELETE /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"Clear cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CouponCheckoutJourney(SequentialTaskSet):
    """Add Items -> Apply Coupon -> Checkout -> Pay.

    The happy path: a discounted order placed and paid.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=new_customer_id())
        self.headers = customer_headers(self.state.customer_id)
        product_id = register_product(self.client)
        if product_id is None:
            self.interrupt()
        self.state.product_ids.append(product_id)

    @task
    def create_coupon(self):
        payload = coupon_data()
        with self.client.post(
            "/coupons",
            json=payload,
            headers=admin_headers(),
            catch_response=True,
            name="POST /coupons",
        ) as resp:
            if resp.status_code == 201:
                self.state.coupon_code = payload["code"]
            else:
                resp.failure(f"Create coupon failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def add_item(self):
        with self.client.post(
            "/cart/items",
            json={"product_id": self.state.product_ids[0], "quantity": 2},
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add item failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def apply_coupon(self):
        if not self.state.coupon_code:
            return
        with self.client.post(
            "/cart/coupon",
            json={"coupon_code": self.state.coupon_code},
            headers=self.headers,
            catch_response=True,
            name="POST /cart/coupon",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Apply coupon failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                data = resp.json()
                self.state.order_id = data["id"]
                self.state.order_total = data["total_price"]
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
            if resp.status_code != 200:
                resp.failure(f"Pay failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def review_orders(self):
        with self.client.get(
            "/orders/mine",
            headers=self.headers,
            catch_response=True,
            name="GET /orders/mine",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutAndCancelJourney(SequentialTaskSet):
    """Add Item -> Checkout -> Cancel.

    The unhappy path: stock is reserved at checkout and given back on
    cancellation.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=new_customer_id())
        self.headers = customer_headers(self.state.customer_id)
        product_id = register_product(self.client)
        if product_id is None:
            self.interrupt()
        self.state.product_ids.append(product_id)

    @task
    def add_item(self):
        with self.client.post(
            "/cart/items",
            json=cart_item_data(self.state.product_ids[0]),
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add item failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
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
    def cancel(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/status",
            json={"status": "cancelled", "reason": cancellation_reason()},
            headers=self.headers,
            catch_response=True,
            name="PUT /orders/{id}/status [cancel]",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    """Customer traffic only: browsing, discounted checkout and cancellations."""

    wait_time = between(1, 3)
    tasks = {
        BrowseAndAbandonJourney: 5,
        CouponCheckoutJourney: 3,
        CheckoutAndCancelJourney: 1,
    }
