"""Cart management: merging anonymous carts into user carts.

Merging is two-phase. ``MergeAnonymousCart`` copies the anonymous lines into
the user's cart and commits, recording the id of every line it copied;
``DiscardMergedItems`` then removes exactly those lines from the anonymous
cart. Lines added to the anonymous cart between the two phases are left in
place and picked up by the next merge.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import CartOwner, ShoppingCart
from ordering.domain import ordering
from shared.settings import load_settings

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class MergeAnonymousCart:
    """Append the lines of an anonymous cart to a signed-in user's cart."""

    user_id = Identifier(required=True)
    anonymous_token = String(required=True, max_length=255)


@ordering.command(part_of="ShoppingCart")
class DiscardMergedItems:
    """Remove from an anonymous cart the lines the user's cart has already copied."""

    user_id = Identifier(required=True)
    anonymous_token = String(required=True, max_length=255)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(MergeAnonymousCart)
    def merge_anonymous_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)

        anonymous_cart = repo.find_for_owner(CartOwner(anonymous_token=command.anonymous_token))
        if anonymous_cart is None or not anonymous_cart.items or anonymous_cart.is_expired():
            return 0

        owner = CartOwner(user_id=command.user_id)
        user_cart = repo.find_for_owner(owner)
        if user_cart is None:
            user_cart = ShoppingCart.create(owner, ttl_days=load_settings(current_domain).anonymous_cart_ttl_days)

        merged = user_cart.absorb({str(item.id): item.snapshot() for item in anonymous_cart.items})
        if merged:
            repo.add(user_cart)
            logger.info("anonymous_cart_merged", user_id=str(command.user_id), items_merged=merged)
        return merged

    @handle(DiscardMergedItems)
    def discard_merged_items(self, command):
        repo = current_domain.repository_for(ShoppingCart)

        anonymous_cart = repo.find_for_owner(CartOwner(anonymous_token=command.anonymous_token))
        user_cart = repo.find_for_owner(CartOwner(user_id=command.user_id))
        if anonymous_cart is None or user_cart is None:
            return 0

        copied = json.loads(user_cart.merged_item_ids or "[]")
        discarded = anonymous_cart.discard_items(copied)
        if discarded:
            repo.add(anonymous_cart)
        return discarded
