"""Application tests for cart mutations through CartIdentityResolver."""

import json
import threading

import pytest
from ordering.cart.cart import CartOwner
from ordering.cart.identity import CartIdentityResolver, NewCartItem
from ordering.domain import ordering
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.exceptions import ConflictError

USER = CartOwner(user_id="user-001")


@pytest.fixture()
def resolver(catalog):
    return CartIdentityResolver()


class TestAddItem:
    def test_catalog_prices_are_snapshotted(self, resolver, catalog):
        item = resolver.add_item(USER, NewCartItem(quantity=2, product_id="prod-001", color="Black"))

        assert item.base_price == 450.0
        assert item.offer_price == 399.0
        assert item.title == "Hex Key Set"

        # later catalog changes do not touch the cart line
        catalog.add_product("prod-001", "Hex Key Set", base_price=500.0, offer_price=480.0, colors=("Black",))
        assert resolver.get_cart(USER).items[0].offer_price == 399.0

    def test_unknown_colour_is_rejected(self, resolver):
        with pytest.raises(ValidationError) as exc:
            resolver.add_item(USER, NewCartItem(quantity=1, product_id="prod-001", color="Purple"))
        assert "color" in exc.value.messages

    def test_unknown_product(self, resolver):
        with pytest.raises(ObjectNotFoundError):
            resolver.add_item(USER, NewCartItem(quantity=1, product_id="prod-404"))

    def test_custom_item_is_priced_server_side(self, resolver):
        item = resolver.add_item(
            USER,
            NewCartItem(
                quantity=10,
                custom_category="fastener",
                custom_options={"fastenerType": "Bolt", "size": "M8", "length": "20", "material": "Steel"},
            ),
        )

        assert item.base_price == 5.0
        assert item.offer_price == 5.0
        assert item.title == "Bolt - M8 - Steel - 20mm"
        assert json.loads(item.custom_spec)["quantity"] == 10

    def test_needs_exactly_one_kind(self, resolver):
        with pytest.raises(ValidationError):
            resolver.add_item(USER, NewCartItem(quantity=1))
        with pytest.raises(ValidationError):
            resolver.add_item(
                USER, NewCartItem(quantity=1, product_id="prod-001", custom_category="fastener")
            )

    @pytest.mark.parametrize("quantity", [0, 11, True])
    def test_catalog_quantity_bounds(self, resolver, quantity):
        with pytest.raises(ValidationError):
            resolver.add_item(USER, NewCartItem(quantity=quantity, product_id="prod-002"))

    def test_custom_quantity_allows_one_hundred(self, resolver):
        item = resolver.add_item(
            USER, NewCartItem(quantity=100, custom_category="fastener", custom_options={"fastenerType": "Nut"})
        )
        assert item.quantity == 100


class TestQuantityChanges:
    def test_update(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=1, product_id="prod-002"))
        assert resolver.update_quantity(USER, item.id, 4).quantity == 4

    def test_stale_expected_quantity_is_a_conflict(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=2, product_id="prod-002"))
        resolver.update_quantity(USER, item.id, 3, expected_quantity=2)

        with pytest.raises(ConflictError):
            resolver.update_quantity(USER, item.id, 5, expected_quantity=2)
        assert resolver.get_cart(USER).items[0].quantity == 3

    def test_increment(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=2, product_id="prod-002"))
        assert resolver.increment_quantity(USER, item.id, 2).quantity == 4

    def test_remove(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=2, product_id="prod-002"))
        resolver.remove_item(USER, item.id)
        assert len(resolver.get_cart(USER).items) == 0

    def test_item_of_another_cart_is_not_found(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=2, product_id="prod-002"))
        with pytest.raises(ObjectNotFoundError):
            resolver.remove_item(CartOwner(user_id="user-002"), item.id)


@pytest.mark.slow
class TestConcurrentIncrements:
    def test_no_increment_is_lost(self, resolver):
        item = resolver.add_item(USER, NewCartItem(quantity=1, product_id="prod-002"))
        barrier = threading.Barrier(4)
        errors = []

        def bump():
            with ordering.domain_context():
                barrier.wait()
                try:
                    CartIdentityResolver().increment_quantity(USER, item.id, 2)
                except Exception as exc:  # collected for the assertion below
                    errors.append(exc)

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert resolver.get_cart(USER).items[0].quantity == 9
