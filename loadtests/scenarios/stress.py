"""Stress test scenarios for lock contention and the rate refresh.

CartContentionUser hammers a single cart line from many concurrent users
to exercise the per-owner cart lock. RateRefreshFloodUser asks for display
currencies at a steady pace so concurrent stale reads collapse onto one
exchange-rate fetch.
"""

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import custom_cart_item, display_currency, user_id
from loadtests.helpers.response import extract_error_detail

SHARED_USER_ID = user_id()


class CartContentionUser(HttpUser):
    """Every user edits the same signed-in cart.

    Target: no lost updates; quantity conflicts surface as 409 or 400
    (cap reached), never as 500.
    """

    wait_time = constant_pacing(0.1)

    def on_start(self):
        self.headers = {"X-User-Id": SHARED_USER_ID}
        with self.client.post(
            "/cart",
            json=custom_cart_item(quantity=1),
            headers=self.headers,
            catch_response=True,
            name="[STRESS] POST /cart",
        ) as resp:
            self.item_id = resp.json()["item"]["id"] if resp.status_code == 201 else None

    @task(5)
    def bump(self):
        if self.item_id is None:
            return
        with self.client.patch(
            "/cart",
            json={"itemId": self.item_id, "delta": 1},
            headers=self.headers,
            catch_response=True,
            name="[STRESS] PATCH /cart [delta]",
        ) as resp:
            if resp.status_code >= 500:
                resp.failure(f"Contention failure: {resp.status_code} - {extract_error_detail(resp)}")
            else:
                resp.success()

    @task(1)
    def reset(self):
        if self.item_id is None:
            return
        with self.client.patch(
            "/cart",
            json={"itemId": self.item_id, "quantity": 1},
            headers=self.headers,
            catch_response=True,
            name="[STRESS] PATCH /cart [reset]",
        ) as resp:
            if resp.status_code >= 500:
                resp.failure(f"Reset failure: {resp.status_code} - {extract_error_detail(resp)}")
            else:
                resp.success()


class RateRefreshFloodUser(HttpUser):
    """Steady display-currency reads; watch the logs for one refresh per expiry."""

    wait_time = constant_pacing(0.05)

    @task
    def convert(self):
        self.client.get(
            "/currency/convert",
            params={"amount": 1000, "currency": display_currency()},
            name="[STRESS] GET /currency/convert",
        )
