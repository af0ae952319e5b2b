"""QuoteRequest aggregate: a buyer's request for admin pricing of custom products.

Lifecycle:
    PENDING -> QUOTED -> ACCEPTED
                      -> REJECTED

ACCEPTED and REJECTED are terminal; any other move is a ``ConflictError``.

Notification progress is tracked by three flags that only ever flip from
false to true, each implying the previous one:
    email_sent => email_opened => response_received
The flags never gate a status transition.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.domain import ordering
from ordering.quote.events import (
    QuoteAccepted,
    QuoteEmailOpened,
    QuoteNotificationFailed,
    QuoteNotificationSent,
    QuotePriced,
    QuoteRejected,
    QuoteRequested,
    QuoteResponseReceived,
)
from shared.exceptions import ConflictError


class QuoteStatus(Enum):
    PENDING = "PENDING"
    QUOTED = "QUOTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


_VALID_TRANSITIONS = {
    QuoteStatus.PENDING: {QuoteStatus.QUOTED},
    QuoteStatus.QUOTED: {QuoteStatus.ACCEPTED, QuoteStatus.REJECTED},
    QuoteStatus.ACCEPTED: set(),
    QuoteStatus.REJECTED: set(),
}


@ordering.entity(part_of="QuoteRequest")
class QuoteItem:
    item_type = String(required=True, max_length=20)  # fastener / connector / wire
    category_name = String(required=True, max_length=100)
    title = String(max_length=255)
    specifications = Text(required=True)  # JSON object of option name -> value
    quantity = Integer(required=True, min_value=1)

    @property
    def options(self) -> dict:
        return json.loads(self.specifications) if self.specifications else {}


@ordering.aggregate
class QuoteRequest:
    user_id = Identifier(required=True)
    items = HasMany(QuoteItem)
    notes = Text()
    total_items = Integer(default=0)
    status = String(choices=QuoteStatus, default=QuoteStatus.PENDING.value)

    # Notification progress
    email_sent = Boolean(default=False)
    email_opened = Boolean(default=False)
    response_received = Boolean(default=False)
    notification_attempts = Integer(default=0)
    last_notification_error = String(max_length=255)

    # Admin pricing
    quoted_price = Float(min_value=0.0)
    admin_response = Text()

    created_at = DateTime()
    updated_at = DateTime()
    quoted_at = DateTime()
    decided_at = DateTime()

    @invariant.post
    def must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["A quote request needs at least one item"]})

    @invariant.post
    def notification_flags_are_ordered(self):
        if self.email_opened and not self.email_sent:
            raise ValidationError({"email_opened": ["Email cannot be opened before it was sent"]})
        if self.response_received and not self.email_opened:
            raise ValidationError({"response_received": ["A response cannot arrive before the email was opened"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id, items, notes=None):
        """Create a PENDING quote.

        Args:
            items: list of dicts with item_type, category_name, title,
                specifications (dict) and quantity.
        """
        now = datetime.now(UTC)
        quote_items = [
            QuoteItem(
                item_type=item["item_type"],
                category_name=item["category_name"],
                title=item.get("title"),
                specifications=json.dumps(item["specifications"]),
                quantity=item["quantity"],
            )
            for item in items
        ]

        quote = cls(
            user_id=user_id,
            items=quote_items,
            notes=notes,
            total_items=sum(item.quantity for item in quote_items),
            status=QuoteStatus.PENDING.value,
            email_sent=False,
            email_opened=False,
            response_received=False,
            notification_attempts=0,
            created_at=now,
            updated_at=now,
        )

        quote.raise_(
            QuoteRequested(
                quote_id=str(quote.id),
                user_id=str(user_id),
                item_count=len(quote_items),
                total_items=quote.total_items,
                requested_at=now,
            )
        )
        return quote

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: QuoteStatus):
        current = QuoteStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ConflictError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[QuoteStatus(self.status)]

    def mark_quoted(self, admin_price=None, admin_response=None):
        self._assert_can_transition(QuoteStatus.QUOTED)
        if admin_price is not None and (isinstance(admin_price, bool) or admin_price < 0):
            raise ValidationError({"admin_price": ["Quoted price cannot be negative"]})

        now = datetime.now(UTC)
        self.quoted_price = admin_price
        self.admin_response = admin_response
        self.status = QuoteStatus.QUOTED.value
        self.quoted_at = now
        self.updated_at = now

        self.raise_(
            QuotePriced(
                quote_id=str(self.id),
                user_id=str(self.user_id),
                quoted_price=admin_price,
                quoted_at=now,
            )
        )

    def accept(self, cart_item_ids=None):
        self._assert_can_transition(QuoteStatus.ACCEPTED)

        now = datetime.now(UTC)
        self.status = QuoteStatus.ACCEPTED.value
        self.decided_at = now
        self.updated_at = now

        self.raise_(
            QuoteAccepted(
                quote_id=str(self.id),
                user_id=str(self.user_id),
                cart_item_ids=json.dumps(cart_item_ids or []),
                accepted_at=now,
            )
        )

    def reject(self):
        self._assert_can_transition(QuoteStatus.REJECTED)

        now = datetime.now(UTC)
        self.status = QuoteStatus.REJECTED.value
        self.decided_at = now
        self.updated_at = now

        self.raise_(QuoteRejected(quote_id=str(self.id), user_id=str(self.user_id), rejected_at=now))

    # -------------------------------------------------------------------
    # Notification tracking
    # -------------------------------------------------------------------
    def record_notification_sent(self, message_id=None):
        if self.email_sent:
            return
        now = datetime.now(UTC)
        self.email_sent = True
        self.notification_attempts = (self.notification_attempts or 0) + 1
        self.last_notification_error = None
        self.updated_at = now

        self.raise_(
            QuoteNotificationSent(
                quote_id=str(self.id),
                message_id=message_id,
                attempt=self.notification_attempts,
                sent_at=now,
            )
        )

    def record_notification_failed(self, reason):
        if self.email_sent:
            return
        now = datetime.now(UTC)
        self.notification_attempts = (self.notification_attempts or 0) + 1
        self.last_notification_error = (reason or "Unknown notification error")[:255]
        self.updated_at = now

        self.raise_(
            QuoteNotificationFailed(
                quote_id=str(self.id),
                reason=self.last_notification_error,
                attempt=self.notification_attempts,
                failed_at=now,
            )
        )

    def record_email_opened(self):
        if self.email_opened:
            return
        if not self.email_sent:
            raise ConflictError({"email_opened": ["The quote email has not been sent yet"]})
        now = datetime.now(UTC)
        self.email_opened = True
        self.updated_at = now
        self.raise_(QuoteEmailOpened(quote_id=str(self.id), opened_at=now))

    def record_response_received(self):
        if self.response_received:
            return
        if not self.email_opened:
            raise ConflictError({"response_received": ["The quote email has not been opened yet"]})
        now = datetime.now(UTC)
        self.response_received = True
        self.updated_at = now
        self.raise_(QuoteResponseReceived(quote_id=str(self.id), received_at=now))
