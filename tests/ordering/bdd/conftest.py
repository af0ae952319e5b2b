"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import CartOwner
from ordering.cart.identity import CartIdentityResolver, NewCartItem
from ordering.quote.lifecycle import QuoteLifecycleManager
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then
from shared.exceptions import ConflictError


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def error():
    """Container for the error raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def resolver(catalog):
    return CartIdentityResolver()


@pytest.fixture()
def manager(notifier):
    return QuoteLifecycleManager()


# ---------------------------------------------------------------------------
# Shared Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a guest cart "{token}" holding products {product_ids}'))
def guest_cart_with_products(resolver, token, product_ids):
    owner = CartOwner(anonymous_token=token)
    for product_id in [p.strip().strip('"') for p in product_ids.split(",")]:
        resolver.add_item(owner, NewCartItem(quantity=1, product_id=product_id))


@given(parsers.cfparse('the user cart holds product "{product_id}"'))
def user_cart_with_product(resolver, user_id, product_id):
    resolver.add_item(CartOwner(user_id=user_id), NewCartItem(quantity=1, product_id=product_id))


# ---------------------------------------------------------------------------
# Shared Then steps
# ---------------------------------------------------------------------------
@then("the action succeeds")
def action_succeeds(error):
    assert error["exc"] is None


@then(parsers.cfparse("the action fails with a {kind} error"))
def action_fails(error, kind):
    expected = {"validation": ValidationError, "conflict": ConflictError, "not-found": ObjectNotFoundError}[kind]
    assert isinstance(error["exc"], expected)
