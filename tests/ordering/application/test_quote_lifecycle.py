"""Application tests for QuoteLifecycleManager.

Covers:
- Submission validation and persistence
- Admin notification success, failure, timeout and retry
- Admin pricing, buyer acceptance and rejection
- Ownership checks and concurrent acceptance
"""

import threading
import time

import pytest
from ordering.cart.cart import CartOwner, ShoppingCart
from ordering.cart.identity import CartIdentityResolver
from ordering.domain import ordering
from ordering.notifier.port import EmailNotifier
from ordering.quote.lifecycle import NOTIFIER_WORKERS, QuoteLifecycleManager, notifier_backlog
from ordering.quote.quote import QuoteStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.exceptions import ConflictError

BOLTS = {"type": "fastener", "categoryName": "Bolt", "specifications": {"size": "M8"}, "quantity": 10}


class ExplodingNotifier(EmailNotifier):
    def send(self, to, subject, body, html_body=None, quote_id=None, timeout_seconds=None):
        raise RuntimeError("SMTP connection refused")


class HangingNotifier(EmailNotifier):
    """Ignores the timeout it is given and blocks until released."""

    def __init__(self):
        self.release = threading.Event()

    def send(self, to, subject, body, html_body=None, quote_id=None, timeout_seconds=None):
        self.release.wait(5)
        return {"message_id": "late", "status": "sent"}


def _wait_for_idle_notifier(deadline_seconds=5.0):
    deadline = time.monotonic() + deadline_seconds
    while notifier_backlog() and time.monotonic() < deadline:
        time.sleep(0.01)


@pytest.fixture()
def manager(notifier):
    return QuoteLifecycleManager()


@pytest.fixture()
def quote(manager):
    return manager.submit("user-001", [BOLTS], notes="Need by Friday")


class TestSubmit:
    def test_persists_a_pending_quote(self, quote):
        assert quote.status == QuoteStatus.PENDING.value
        assert str(quote.user_id) == "user-001"
        assert quote.total_items == 10
        assert quote.items[0].title == "Bolt - M8"
        assert quote.notes == "Need by Friday"

    def test_notifies_the_admin(self, quote, notifier):
        assert quote.email_sent
        assert quote.notification_attempts == 1
        assert len(notifier.sent_emails) == 1
        assert notifier.sent_emails[0]["subject"] == f"New quote request #{quote.id}"

    @pytest.mark.parametrize("items", [[], None, "bolts"])
    def test_no_items(self, manager, items):
        with pytest.raises(ValidationError) as exc:
            manager.submit("user-001", items)
        assert exc.value.messages == {"items": ["No items provided"]}

    @pytest.mark.parametrize(
        "bad_item",
        [
            {"type": "fastener", "categoryName": "Bolt", "quantity": 1},
            {"type": "fastener", "categoryName": "Bolt", "specifications": {}, "quantity": 1},
            {"type": "fastener", "categoryName": "Bolt", "specifications": {"size": "M8"}, "quantity": 101},
            {"type": "fastener", "categoryName": "Rivet", "specifications": {"size": "M8"}, "quantity": 1},
            {"type": "gizmo", "categoryName": "Bolt", "specifications": {"size": "M8"}, "quantity": 1},
        ],
    )
    def test_invalid_item_names_its_position(self, manager, bad_item):
        with pytest.raises(ValidationError) as exc:
            manager.submit("user-001", [BOLTS, bad_item])
        assert "items[1]" in exc.value.messages

    def test_requires_a_user(self, manager):
        with pytest.raises(ValidationError):
            manager.submit(None, [BOLTS])


class TestNotificationFailures:
    def test_failed_notification_keeps_the_quote(self, manager, notifier):
        notifier.configure(should_succeed=False, failure_reason="Mailbox full")

        quote = manager.submit("user-001", [BOLTS])

        assert quote.status == QuoteStatus.PENDING.value
        assert not quote.email_sent
        assert quote.notification_attempts == 1
        assert quote.last_notification_error == "Mailbox full"

    def test_notifier_exception_is_recorded(self):
        manager = QuoteLifecycleManager(notifier=ExplodingNotifier())

        quote = manager.submit("user-001", [BOLTS])

        assert not quote.email_sent
        assert "SMTP connection refused" in quote.last_notification_error

    @pytest.mark.slow
    def test_slow_notifier_times_out(self, notifier):
        notifier.configure(delay_seconds=0.5)
        manager = QuoteLifecycleManager(notifier_timeout_seconds=0.1)

        quote = manager.submit("user-001", [BOLTS])

        assert not quote.email_sent
        assert "timed out after 0.1s" in quote.last_notification_error

    @pytest.mark.slow
    def test_notifier_ignoring_its_timeout_is_abandoned(self):
        hanging = HangingNotifier()
        manager = QuoteLifecycleManager(notifier=hanging, notifier_timeout_seconds=0.05)
        try:
            quote = manager.submit("user-001", [BOLTS])

            assert not quote.email_sent
            assert "No response within" in quote.last_notification_error
        finally:
            hanging.release.set()
            _wait_for_idle_notifier()

    @pytest.mark.slow
    def test_tied_up_workers_fail_new_notifications_fast(self):
        hanging = HangingNotifier()
        manager = QuoteLifecycleManager(notifier=hanging, notifier_timeout_seconds=0.05)
        try:
            for _ in range(NOTIFIER_WORKERS):
                manager.submit("user-001", [BOLTS])
            assert notifier_backlog() == NOTIFIER_WORKERS

            quote = manager.submit("user-001", [BOLTS])

            assert quote.last_notification_error == f"All {NOTIFIER_WORKERS} notifier workers are busy"
        finally:
            hanging.release.set()
            _wait_for_idle_notifier()

        assert manager.retry_notification(quote.id).email_sent

    def test_failure_can_be_limited_to_one_quote(self, manager, notifier):
        notifier.configure(should_succeed=False)
        first = manager.submit("user-001", [BOLTS])
        notifier.configure(failing_quote_ids=[first.id])

        retried = manager.retry_notification(first.id)
        second = manager.submit("user-001", [BOLTS])

        assert not retried.email_sent
        assert retried.notification_attempts == 2
        assert notifier.attempts[str(first.id)] == 2
        assert notifier.emails_for(first.id) == []
        assert second.email_sent
        assert len(notifier.emails_for(second.id)) == 1

    def test_retry_after_failure(self, manager, notifier):
        notifier.configure(should_succeed=False)
        quote = manager.submit("user-001", [BOLTS])

        notifier.configure(should_succeed=True)
        retried = manager.retry_notification(quote.id)

        assert retried.email_sent
        assert retried.notification_attempts == 2
        assert len(notifier.sent_emails) == 1

    def test_retry_after_success_sends_nothing(self, manager, quote, notifier):
        manager.retry_notification(quote.id)
        assert len(notifier.sent_emails) == 1


class TestTracking:
    def test_opened_then_response(self, manager, quote):
        manager.record_email_opened(quote.id)
        tracked = manager.record_response_received(quote.id)

        assert tracked.email_opened
        assert tracked.response_received

    def test_opened_before_sent_is_a_conflict(self, manager, notifier):
        notifier.configure(should_succeed=False)
        quote = manager.submit("user-001", [BOLTS])

        with pytest.raises(ConflictError):
            manager.record_email_opened(quote.id)


class TestAccept:
    def test_accept_adds_quoted_lines_to_cart(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0, admin_response="Can ship Monday")

        item_ids = manager.accept(quote.id, "user-001")

        cart = current_domain.repository_for(ShoppingCart).find_for_owner(CartOwner(user_id="user-001"))
        assert [str(i.id) for i in cart.items] == item_ids
        line = cart.items[0]
        assert line.offer_price == 500.0
        assert line.base_price == 500.0
        assert line.quantity == 10
        assert str(line.quote_id) == str(quote.id)
        assert manager.get(quote.id, "user-001").status == QuoteStatus.ACCEPTED.value

    def test_accept_without_admin_price_uses_computed_price(self, manager, quote):
        manager.mark_quoted(quote.id)

        manager.accept(quote.id, "user-001")

        cart = current_domain.repository_for(ShoppingCart).find_for_owner(CartOwner(user_id="user-001"))
        assert cart.items[0].offer_price == 5.0

    def test_quoted_price_survives_quantity_round_trip(self, manager):
        quote = manager.submit("user-001", [{**BOLTS, "quantity": 3}])
        manager.mark_quoted(quote.id, admin_price=100.0)
        owner = CartOwner(user_id="user-001")
        resolver = CartIdentityResolver()

        [item_id] = manager.accept(quote.id, "user-001")
        resolver.update_quantity(owner, item_id, 1)
        line = resolver.update_quantity(owner, item_id, 3)

        assert line.offer_price == 100.0
        assert resolver.get_cart(owner).subtotal == 100.0

    def test_second_accept_is_a_conflict_and_adds_nothing(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)
        manager.accept(quote.id, "user-001")

        with pytest.raises(ConflictError):
            manager.accept(quote.id, "user-001")

        cart = current_domain.repository_for(ShoppingCart).find_for_owner(CartOwner(user_id="user-001"))
        assert len(cart.items) == 1

    def test_pending_quote_cannot_be_accepted(self, manager, quote):
        with pytest.raises(ConflictError):
            manager.accept(quote.id, "user-001")
        assert current_domain.repository_for(ShoppingCart).find_for_owner(CartOwner(user_id="user-001")) is None

    def test_accept_of_rejected_quote_is_a_conflict(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)
        manager.reject(quote.id, "user-001")

        with pytest.raises(ConflictError):
            manager.accept(quote.id, "user-001")

    @pytest.mark.slow
    def test_concurrent_accepts_succeed_once(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)
        barrier = threading.Barrier(2)
        outcomes = []

        def accept():
            with ordering.domain_context():
                barrier.wait()
                try:
                    QuoteLifecycleManager().accept(quote.id, "user-001")
                    outcomes.append("accepted")
                except ConflictError:
                    outcomes.append("conflict")

        threads = [threading.Thread(target=accept) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["accepted", "conflict"]
        cart = current_domain.repository_for(ShoppingCart).find_for_owner(CartOwner(user_id="user-001"))
        assert len(cart.items) == 1


class TestRejectAndOwnership:
    def test_reject(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)
        rejected = manager.reject(quote.id, "user-001")
        assert rejected.status == QuoteStatus.REJECTED.value

    def test_mark_quoted_twice_is_a_conflict(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)
        with pytest.raises(ConflictError):
            manager.mark_quoted(quote.id, admin_price=400.0)

    def test_foreign_quote_does_not_exist(self, manager, quote):
        manager.mark_quoted(quote.id, admin_price=500.0)

        with pytest.raises(ObjectNotFoundError):
            manager.get(quote.id, "user-002")
        with pytest.raises(ObjectNotFoundError):
            manager.accept(quote.id, "user-002")
        with pytest.raises(ObjectNotFoundError):
            manager.reject(quote.id, "user-002")

    def test_list_for_user(self, manager, quote):
        manager.submit("user-002", [BOLTS])
        second = manager.submit("user-001", [BOLTS])

        quotes = manager.list_for_user("user-001")

        assert [str(q.id) for q in quotes] == [str(second.id), str(quote.id)]
