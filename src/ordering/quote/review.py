"""Admin review and buyer rejection: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.quote.quote import QuoteRequest
from ordering.quote.repository import load_owned_quote


@ordering.command(part_of="QuoteRequest")
class MarkQuoteQuoted:
    """An admin priced the quote."""

    quote_id = Identifier(required=True)
    admin_price = Float(min_value=0.0)
    admin_response = Text()


@ordering.command(part_of="QuoteRequest")
class RejectQuote:
    """The buyer declined the admin's price."""

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)


@ordering.command_handler(part_of=QuoteRequest)
class QuoteReviewHandler:
    @handle(MarkQuoteQuoted)
    def mark_quoted(self, command):
        repo = current_domain.repository_for(QuoteRequest)
        quote = repo.get(command.quote_id)
        quote.mark_quoted(admin_price=command.admin_price, admin_response=command.admin_response)
        repo.add(quote)

    @handle(RejectQuote)
    def reject_quote(self, command):
        repo = current_domain.repository_for(QuoteRequest)
        quote = load_owned_quote(repo, command.quote_id, command.user_id)
        quote.reject()
        repo.add(quote)
