"""Quote lifecycle manager: the entry point for every quote operation.

Transitions run as commands under a per-quote lock that is held until the
unit of work commits, and each handler re-reads the persisted status before
moving it. Two concurrent accepts of one quote therefore serialise: the
first moves it to ACCEPTED, the second finds ACCEPTED and fails with
``ConflictError``.

The admin notification runs after the quote is committed, on a small worker
pool. The adapter is handed the timeout and must give up on its own; a send
that ignores it is abandoned and keeps its worker until it returns. When
every worker is tied up, new notifications fail straight away. A failed or
slow notifier is recorded on the quote (``email_sent`` stays false) and can be
retried; it never undoes the submission.
"""

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import CUSTOM_MAX_QUANTITY, CartOwner
from ordering.notifier import get_notifier
from ordering.notifier.port import EmailNotifier
from ordering.quote.acceptance import AcceptQuote
from ordering.quote.quote import QuoteRequest
from ordering.quote.quoted_lines import quote_item_spec
from ordering.quote.repository import load_owned_quote
from ordering.quote.review import MarkQuoteQuoted, RejectQuote
from ordering.quote.submission import SubmitQuoteRequest
from ordering.quote.templates import QuoteRequestAdminTemplate
from ordering.quote.tracking import (
    NotificationOutcome,
    RecordQuoteEmailOpened,
    RecordQuoteNotification,
    RecordQuoteResponseReceived,
)
from ordering.utils.locks import KeyedLocks, cart_locks, quote_locks
from pricing.custom_product.pricer import CustomProductPricer
from shared.exceptions import ExternalServiceError
from shared.logging import log_context
from shared.settings import load_settings

logger = structlog.get_logger(__name__)

NOTIFIER_WORKERS = 4

_notifier_pool = ThreadPoolExecutor(max_workers=NOTIFIER_WORKERS, thread_name_prefix="quote-notifier")
_in_flight = 0
_in_flight_guard = threading.Lock()


def notifier_backlog() -> int:
    """Sends still running on the notifier pool, including abandoned ones."""
    with _in_flight_guard:
        return _in_flight


def _release_worker(_future) -> None:
    global _in_flight
    with _in_flight_guard:
        _in_flight -= 1


_REQUIRED_ITEM_KEYS = ("type", "categoryName", "specifications", "quantity")


class QuoteLifecycleManager:
    def __init__(
        self,
        notifier: EmailNotifier | None = None,
        pricer: CustomProductPricer | None = None,
        locks: KeyedLocks | None = None,
        cart_lock_registry: KeyedLocks | None = None,
        admin_email: str | None = None,
        notifier_timeout_seconds: float | None = None,
    ) -> None:
        self.notifier = notifier
        self.pricer = pricer or CustomProductPricer()
        self.locks = locks or quote_locks
        self.cart_locks = cart_lock_registry or cart_locks
        self.admin_email = admin_email
        self.notifier_timeout_seconds = notifier_timeout_seconds

    def _repo(self):
        return current_domain.repository_for(QuoteRequest)

    def _process(self, quote_id, command, *extra_lock_keys):
        with (
            self.locks.hold(f"quote:{quote_id}"),
            self.cart_locks.hold(*extra_lock_keys),
            log_context(quote_id=str(quote_id)),
        ):
            return current_domain.process(command, asynchronous=False)

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def _normalise_items(self, items) -> list[dict]:
        if not isinstance(items, list) or not items:
            raise ValidationError({"items": ["No items provided"]})

        normalised = []
        for index, item in enumerate(items):
            field = f"items[{index}]"
            if not isinstance(item, dict) or any(not item.get(key) for key in _REQUIRED_ITEM_KEYS):
                raise ValidationError({field: ["Invalid item data"]})

            specifications = item["specifications"]
            quantity = item["quantity"]
            if not isinstance(specifications, dict):
                raise ValidationError({field: ["Specifications must be an object"]})
            if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= CUSTOM_MAX_QUANTITY:
                raise ValidationError({field: [f"Quantity must be between 1 and {CUSTOM_MAX_QUANTITY}"]})

            try:
                spec = quote_item_spec(item["type"], item["categoryName"], specifications, quantity)
                title = self.pricer.price(spec).title
            except ValidationError as exc:
                raise ValidationError({field: exc.messages}) from exc

            normalised.append(
                {
                    "item_type": spec.category.value,
                    "category_name": str(item["categoryName"]),
                    "title": title,
                    "specifications": specifications,
                    "quantity": quantity,
                }
            )
        return normalised

    def submit(self, user_id, items, notes=None) -> QuoteRequest:
        """Persist a PENDING quote, then try to notify the admin."""
        if not user_id:
            raise ValidationError({"user_id": ["A signed-in user is required"]})

        normalised = self._normalise_items(items)
        quote_id = current_domain.process(
            SubmitQuoteRequest(user_id=str(user_id), items=json.dumps(normalised), notes=notes),
            asynchronous=False,
        )
        logger.info("quote_submitted", quote_id=quote_id, user_id=str(user_id), item_count=len(normalised))

        self._notify(quote_id)
        return self._repo().get(quote_id)

    def retry_notification(self, quote_id) -> QuoteRequest:
        """Re-send the admin email for a quote whose notification never went out."""
        self._notify(quote_id)
        return self._repo().get(quote_id)

    # -------------------------------------------------------------------
    # Notification
    # -------------------------------------------------------------------
    def _settings(self):
        return load_settings(current_domain)

    def _send_with_timeout(self, message: dict, quote_id: str) -> dict:
        global _in_flight
        notifier = self.notifier or get_notifier()
        timeout = self.notifier_timeout_seconds or self._settings().notifier_timeout_seconds
        to = self.admin_email or self._settings().admin_email

        with _in_flight_guard:
            busy = _in_flight if _in_flight >= NOTIFIER_WORKERS else None
            if busy is None:
                _in_flight += 1
        if busy is not None:
            logger.warning("quote_notifier_saturated", quote_id=quote_id, busy_workers=busy)
            raise ExternalServiceError("notifier", f"All {busy} notifier workers are busy")

        future = _notifier_pool.submit(
            notifier.send,
            to=to,
            subject=message["subject"],
            body=message["body"],
            html_body=message.get("html_body"),
            quote_id=quote_id,
            timeout_seconds=timeout,
        )
        future.add_done_callback(_release_worker)
        try:
            # Adapters enforce `timeout` themselves
            return future.result(timeout=timeout * 2)
        except FutureTimeoutError as exc:
            logger.warning(
                "quote_notifier_abandoned",
                quote_id=quote_id,
                timeout_seconds=timeout,
                busy_workers=notifier_backlog(),
            )
            raise ExternalServiceError("notifier", f"No response within {timeout}s") from exc
        except Exception as exc:
            raise ExternalServiceError("notifier", str(exc)) from exc

    def _notify(self, quote_id) -> bool:
        quote = self._repo().get(quote_id)
        if quote.email_sent:
            return True

        message = QuoteRequestAdminTemplate.render(
            {
                "quote_id": str(quote.id),
                "user_id": str(quote.user_id),
                "submitted_at": quote.created_at.isoformat() if quote.created_at else "",
                "total_items": quote.total_items,
                "notes": quote.notes,
                "items": [
                    {"title": i.title, "category_name": i.category_name, "quantity": i.quantity}
                    for i in quote.items
                ],
            }
        )

        try:
            result = self._send_with_timeout(message, str(quote_id))
        except ExternalServiceError as exc:
            result = {"status": NotificationOutcome.FAILED.value, "error": exc.reason}

        sent = result.get("status") == NotificationOutcome.SENT.value
        if sent:
            logger.info("quote_notification_sent", quote_id=str(quote_id), message_id=result.get("message_id"))
        else:
            logger.warning(
                "quote_notification_failed",
                quote_id=str(quote_id),
                error=result.get("error", "Unknown notification error"),
            )

        self._process(
            quote_id,
            RecordQuoteNotification(
                quote_id=str(quote_id),
                status=NotificationOutcome.SENT.value if sent else NotificationOutcome.FAILED.value,
                message_id=result.get("message_id"),
                error=None if sent else str(result.get("error", "Unknown notification error"))[:255],
            ),
        )
        return sent

    def record_email_opened(self, quote_id) -> QuoteRequest:
        self._process(quote_id, RecordQuoteEmailOpened(quote_id=str(quote_id)))
        return self._repo().get(quote_id)

    def record_response_received(self, quote_id) -> QuoteRequest:
        self._process(quote_id, RecordQuoteResponseReceived(quote_id=str(quote_id)))
        return self._repo().get(quote_id)

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def mark_quoted(self, quote_id, admin_price=None, admin_response=None) -> QuoteRequest:
        self._process(
            quote_id,
            MarkQuoteQuoted(quote_id=str(quote_id), admin_price=admin_price, admin_response=admin_response),
        )
        logger.info("quote_priced", quote_id=str(quote_id), admin_price=admin_price)
        return self._repo().get(quote_id)

    def accept(self, quote_id, user_id) -> list[str]:
        """Accept a QUOTED quote; returns the ids of the cart items it created."""
        item_ids = self._process(
            quote_id,
            AcceptQuote(quote_id=str(quote_id), user_id=str(user_id)),
            CartOwner(user_id=str(user_id)).key,
        )
        logger.info("quote_accepted", quote_id=str(quote_id), user_id=str(user_id), cart_items=len(item_ids))
        return item_ids

    def reject(self, quote_id, user_id) -> QuoteRequest:
        self._process(quote_id, RejectQuote(quote_id=str(quote_id), user_id=str(user_id)))
        logger.info("quote_rejected", quote_id=str(quote_id), user_id=str(user_id))
        return self._repo().get(quote_id)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, quote_id, user_id) -> QuoteRequest:
        return load_owned_quote(self._repo(), quote_id, user_id)

    def list_for_user(self, user_id) -> list[QuoteRequest]:
        return self._repo().find_for_user(user_id)
