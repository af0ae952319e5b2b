"""Quote acceptance: command and handler.

Accepting is one unit of work across two aggregates: the quote's lines are
priced and appended to the buyer's cart, and the quote moves to ACCEPTED.
Either both commit or neither does.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import CartOwner, ShoppingCart
from ordering.domain import ordering
from ordering.quote.quote import QuoteRequest, QuoteStatus
from ordering.quote.quoted_lines import price_quote_items
from ordering.quote.repository import load_owned_quote
from pricing.custom_product.pricer import CustomProductPricer
from shared.exceptions import ConflictError
from shared.settings import load_settings

_pricer = CustomProductPricer()


@ordering.command(part_of="QuoteRequest")
class AcceptQuote:
    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)


@ordering.command_handler(part_of=QuoteRequest)
class AcceptQuoteHandler:
    @handle(AcceptQuote)
    def accept_quote(self, command):
        quote_repo = current_domain.repository_for(QuoteRequest)
        quote = load_owned_quote(quote_repo, command.quote_id, command.user_id)

        # Check before touching the cart so a repeated accept adds nothing
        if QuoteStatus(quote.status) != QuoteStatus.QUOTED:
            raise ConflictError({"status": [f"Cannot transition from {quote.status} to {QuoteStatus.ACCEPTED.value}"]})

        lines = price_quote_items(quote.items, quote.quoted_price, _pricer)

        cart_repo = current_domain.repository_for(ShoppingCart)
        owner = CartOwner(user_id=str(quote.user_id))
        cart = cart_repo.find_for_owner(owner)
        if cart is None:
            cart = ShoppingCart.create(owner, ttl_days=load_settings(current_domain).anonymous_cart_ttl_days)

        item_ids = []
        for line in lines:
            item = cart.add_custom_item(
                custom_category=line.custom_category,
                custom_spec=line.custom_spec,
                title=line.title,
                image=line.image,
                quantity=line.quantity,
                base_price=line.base_price,
                offer_price=line.offer_price,
                quote_id=str(quote.id),
            )
            item_ids.append(str(item.id))

        quote.accept(cart_item_ids=item_ids)

        cart_repo.add(cart)
        quote_repo.add(quote)
        return item_ids
