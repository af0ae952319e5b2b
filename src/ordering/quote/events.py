"""Domain events for the QuoteRequest aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="QuoteRequest")
class QuoteRequested:
    """A buyer submitted custom products for admin pricing."""

    __version__ = 1

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_items = Integer(required=True)
    requested_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteNotificationSent:
    __version__ = 1

    quote_id = Identifier(required=True)
    message_id = String(max_length=100)
    attempt = Integer(required=True)
    sent_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteNotificationFailed:
    """The admin notification could not be delivered; the quote stays retryable."""

    __version__ = 1

    quote_id = Identifier(required=True)
    reason = String(max_length=255)
    attempt = Integer(required=True)
    failed_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteEmailOpened:
    __version__ = 1

    quote_id = Identifier(required=True)
    opened_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteResponseReceived:
    __version__ = 1

    quote_id = Identifier(required=True)
    received_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuotePriced:
    """An admin priced the quote and moved it to QUOTED."""

    __version__ = 1

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)
    quoted_price = Float()
    quoted_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteAccepted:
    __version__ = 1

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cart_item_ids = Text()  # JSON array
    accepted_at = DateTime(required=True)


@ordering.event(part_of="QuoteRequest")
class QuoteRejected:
    __version__ = 1

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rejected_at = DateTime(required=True)
