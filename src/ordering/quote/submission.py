"""Quote submission: command and handler.

The handler only persists the PENDING quote. Notifying the admin happens
after the commit, outside this unit of work, so a notifier failure can
never lose a submitted quote.
"""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.quote.quote import QuoteRequest


@ordering.command(part_of="QuoteRequest")
class SubmitQuoteRequest:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {item_type, category_name, title, specifications, quantity}
    notes = Text()


@ordering.command_handler(part_of=QuoteRequest)
class SubmitQuoteRequestHandler:
    @handle(SubmitQuoteRequest)
    def submit_quote_request(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        quote = QuoteRequest.create(
            user_id=command.user_id,
            items=items,
            notes=command.notes,
        )
        current_domain.repository_for(QuoteRequest).add(quote)
        return str(quote.id)
