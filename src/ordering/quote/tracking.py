"""Notification tracking: commands and handler for the quote email flags."""

from enum import Enum

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.quote.quote import QuoteRequest


class NotificationOutcome(Enum):
    SENT = "sent"
    FAILED = "failed"


@ordering.command(part_of="QuoteRequest")
class RecordQuoteNotification:
    """Outcome of one attempt to email the admin about a quote."""

    quote_id = Identifier(required=True)
    status = String(required=True, choices=NotificationOutcome)
    message_id = String(max_length=100)
    error = String(max_length=255)


@ordering.command(part_of="QuoteRequest")
class RecordQuoteEmailOpened:
    quote_id = Identifier(required=True)


@ordering.command(part_of="QuoteRequest")
class RecordQuoteResponseReceived:
    quote_id = Identifier(required=True)


@ordering.command_handler(part_of=QuoteRequest)
class QuoteTrackingHandler:
    @handle(RecordQuoteNotification)
    def record_notification(self, command):
        repo = current_domain.repository_for(QuoteRequest)
        quote = repo.get(command.quote_id)
        if command.status == NotificationOutcome.SENT.value:
            quote.record_notification_sent(message_id=command.message_id)
        else:
            quote.record_notification_failed(reason=command.error)
        repo.add(quote)

    @handle(RecordQuoteEmailOpened)
    def record_email_opened(self, command):
        repo = current_domain.repository_for(QuoteRequest)
        quote = repo.get(command.quote_id)
        quote.record_email_opened()
        repo.add(quote)

    @handle(RecordQuoteResponseReceived)
    def record_response_received(self, command):
        repo = current_domain.repository_for(QuoteRequest)
        quote = repo.get(command.quote_id)
        quote.record_response_received()
        repo.add(quote)
