"""BDD tests for the quote request lifecycle."""

import pytest
from ordering.cart.cart import CartOwner
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from shared.exceptions import ConflictError

scenarios("features/quote_lifecycle.feature")


@pytest.fixture()
def quote_box():
    return {}


def capture(error, action):
    try:
        action()
    except (ValidationError, ObjectNotFoundError, ConflictError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the buyer submitted a quote for {quantity:d} "{fastener}" fasteners of size "{size}"'))
def buyer_submitted_quote(manager, user_id, quote_box, quantity, fastener, size):
    quote = manager.submit(
        user_id,
        [{"type": "fastener", "categoryName": fastener, "specifications": {"size": size}, "quantity": quantity}],
    )
    quote_box["id"] = str(quote.id)


@given(parsers.cfparse("the admin quoted {price:f}"))
def admin_quoted(manager, quote_box, price):
    manager.mark_quoted(quote_box["id"], admin_price=price)


@given("the buyer accepted the quote")
def buyer_accepted(manager, user_id, quote_box):
    manager.accept(quote_box["id"], user_id)


@given("the notifier is down")
def notifier_down(notifier):
    notifier.configure(should_succeed=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the buyer accepts the quote")
def buyer_accepts(manager, user_id, quote_box, error):
    capture(error, lambda: manager.accept(quote_box["id"], user_id))


@when("another buyer accepts the quote")
def other_buyer_accepts(manager, quote_box, error):
    capture(error, lambda: manager.accept(quote_box["id"], "user-999"))


@when("the buyer rejects the quote")
def buyer_rejects(manager, user_id, quote_box, error):
    capture(error, lambda: manager.reject(quote_box["id"], user_id))


@when("the notifier recovers and the email is retried")
def notifier_recovers(manager, notifier, quote_box):
    notifier.configure(should_succeed=True)
    manager.retry_notification(quote_box["id"])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the quote status is "{status}"'))
def quote_status(manager, user_id, quote_box, status):
    assert manager.get(quote_box["id"], user_id).status == status


@then("the admin was emailed")
def admin_emailed(manager, user_id, quote_box, notifier):
    assert manager.get(quote_box["id"], user_id).email_sent
    assert any(quote_box["id"] in email["subject"] for email in notifier.sent_emails)


@then(parsers.cfparse("the buyer cart holds a line priced {price:f}"))
def buyer_cart_line_price(resolver, user_id, price):
    cart = resolver.get_cart(CartOwner(user_id=user_id))
    assert [item.offer_price for item in cart.items] == [price]


@then(parsers.cfparse("the buyer cart holds {count:d} lines"))
def buyer_cart_holds(resolver, user_id, count):
    assert len(resolver.get_cart(CartOwner(user_id=user_id)).items) == count
