"""Storefront load test scenarios.

Stateful SequentialTaskSet journeys covering a guest building a cart of
custom products, a guest signing in (cart merge), the full quote request
lifecycle through acceptance, and stateless shipping and currency lookups.
"""

import os
import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    admin_quote_data,
    custom_cart_item,
    display_currency,
    quote_request_data,
    shipping_request,
    user_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CartState, QuoteState

ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")


class GuestCartJourney(SequentialTaskSet):
    """View Cart -> Add Items -> Increment -> Set Quantity -> Remove -> View in USD.

    Models an anonymous shopper; the guest-id cookie issued on the first
    request identifies the cart on every follow-up request.
    """

    def on_start(self):
        self.client.cookies.clear()
        self.state = CartState()

    @task
    def view_empty_cart(self):
        with self.client.get("/cart", catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_items(self):
        for _ in range(3):
            with self.client.post(
                "/cart",
                json=custom_cart_item(),
                catch_response=True,
                name="POST /cart",
            ) as resp:
                if resp.status_code == 201:
                    item = resp.json()["item"]
                    self.state.item_ids.append(item["id"])
                    self.state.quantities[item["id"]] = item["quantity"]
                else:
                    resp.failure(f"Add cart item failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def increment_first_item(self):
        if not self.state.item_ids:
            self.interrupt()
        item_id = self.state.item_ids[0]
        with self.client.patch(
            "/cart",
            json={"itemId": item_id, "delta": 1},
            catch_response=True,
            name="PATCH /cart [delta]",
        ) as resp:
            if resp.status_code == 200:
                self.state.quantities[item_id] = resp.json()["item"]["quantity"]
            elif resp.status_code == 400:
                # Already at the cap
                resp.success()
            else:
                resp.failure(f"Increment failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def set_quantity_with_expected(self):
        if not self.state.item_ids:
            self.interrupt()
        item_id = self.state.item_ids[-1]
        with self.client.patch(
            "/cart",
            json={
                "itemId": item_id,
                "quantity": random.randint(1, 20),
                "expectedQuantity": self.state.quantities[item_id],
            },
            catch_response=True,
            name="PATCH /cart [quantity]",
        ) as resp:
            if resp.status_code not in (200, 409):
                resp.failure(f"Set quantity failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def remove_item(self):
        if not self.state.item_ids:
            self.interrupt()
        item_id = self.state.item_ids.pop()
        with self.client.delete(f"/cart/{item_id}", catch_response=True, name="DELETE /cart/{id}") as resp:
            if resp.status_code != 200:
                resp.failure(f"Remove item failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def view_cart_in_display_currency(self):
        with self.client.get(
            "/cart",
            params={"currency": display_currency()},
            catch_response=True,
            name="GET /cart?currency",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class SignInMergeJourney(SequentialTaskSet):
    """Guest adds items, then signs in and finds them in the user cart."""

    def on_start(self):
        self.client.cookies.clear()
        self.state = CartState(user_id=user_id())

    @task
    def add_as_guest(self):
        for _ in range(2):
            with self.client.post("/cart", json=custom_cart_item(), catch_response=True, name="POST /cart") as resp:
                if resp.status_code == 201:
                    self.state.item_ids.append(resp.json()["item"]["id"])
                else:
                    resp.failure(f"Add cart item failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def sign_in(self):
        with self.client.get(
            "/cart",
            headers={"X-User-Id": self.state.user_id},
            catch_response=True,
            name="GET /cart [sign-in]",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Sign-in cart failed: {resp.status_code} - {extract_error_detail(resp)}")
            elif len(resp.json()["items"]) != len(self.state.item_ids):
                resp.failure(f"Merged cart has {len(resp.json()['items'])} items, expected {len(self.state.item_ids)}")

    @task
    def done(self):
        self.interrupt()


class QuoteLifecycleJourney(SequentialTaskSet):
    """Submit Quote -> Admin Prices -> Buyer Accepts -> View Cart.

    Skips the admin and acceptance steps when no ADMIN_API_KEY is set.
    """

    def on_start(self):
        self.state = QuoteState(user_id=user_id())
        self.headers = {"X-User-Id": self.state.user_id}

    @task
    def submit_quote(self):
        with self.client.post(
            "/quote-request",
            json=quote_request_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /quote-request",
        ) as resp:
            if resp.status_code == 201:
                self.state.quote_id = resp.json()["quoteId"]
            else:
                resp.failure(f"Submit quote failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def list_quotes(self):
        self.client.get("/quote-request", headers=self.headers, name="GET /quote-request")

    @task
    def admin_prices_quote(self):
        if not ADMIN_API_KEY:
            self.interrupt()
        with self.client.put(
            f"/admin/quote-requests/{self.state.quote_id}/quote",
            json=admin_quote_data(),
            headers={"X-Admin-Key": ADMIN_API_KEY},
            catch_response=True,
            name="PUT /admin/quote-requests/{id}/quote",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "QUOTED"
            else:
                resp.failure(f"Admin quote failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def accept_quote(self):
        with self.client.post(
            f"/quote-request/{self.state.quote_id}/accept",
            headers=self.headers,
            catch_response=True,
            name="POST /quote-request/{id}/accept",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "ACCEPTED"
                self.state.cart_item_ids = resp.json()["cartItemIds"]
            else:
                resp.failure(f"Accept quote failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.headers, name="GET /cart [signed-in]")

    @task
    def done(self):
        self.interrupt()


class PricingLookups(SequentialTaskSet):
    """Shipping countries -> shipping quote -> exchange rates -> conversion."""

    @task
    def countries(self):
        self.client.get("/shipping/countries", name="GET /shipping/countries")

    @task
    def calculate_shipping(self):
        with self.client.post(
            "/shipping/calculate",
            json=shipping_request(),
            catch_response=True,
            name="POST /shipping/calculate",
        ) as resp:
            # 404 until the rate table is seeded
            if resp.status_code not in (200, 404):
                resp.failure(f"Shipping failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def rates(self):
        self.client.get("/currency/rates", name="GET /currency/rates")

    @task
    def convert(self):
        self.client.get(
            "/currency/convert",
            params={"amount": round(random.uniform(10, 5000), 2), "currency": display_currency()},
            name="GET /currency/convert",
        )

    @task
    def done(self):
        self.interrupt()


class StorefrontUser(HttpUser):
    """Locust user simulating storefront traffic.

    Weighted distribution:
    - 40% Guest cart building
    - 15% Sign-in with cart merge
    - 15% Quote request lifecycle
    - 30% Shipping and currency lookups
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        GuestCartJourney: 8,
        SignInMergeJourney: 3,
        QuoteLifecycleJourney: 3,
        PricingLookups: 6,
    }
