"""Repository for the QuoteRequest aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.quote.quote import QuoteRequest


@ordering.repository(part_of=QuoteRequest)
class QuoteRequestRepository:
    def find_for_user(self, user_id: str) -> list[QuoteRequest]:
        """The user's quotes, newest first."""
        quotes = self._dao.query.filter(user_id=str(user_id)).all().items
        return sorted(quotes, key=lambda q: q.created_at, reverse=True)


def load_owned_quote(repo, quote_id, user_id) -> QuoteRequest:
    """Load a quote owned by `user_id`; anyone else's quote does not exist for them."""
    quote = repo.get(quote_id)
    if str(quote.user_id) != str(user_id):
        raise ObjectNotFoundError({"quote_id": ["Quote request not found"]})
    return quote
