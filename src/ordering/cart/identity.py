"""Cart identity resolver: which cart a request belongs to, and every cart mutation.

Owners are resolved from the session (signed-in user id) and the anonymous
token cookie. A signed-in request that still carries an anonymous token
absorbs that token's cart into the user's cart.

Each mutation runs as a command under a per-owner lock that is held until
the unit of work has committed, so read-modify-write cycles on one cart
never interleave.
"""

import json
import secrets
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import CATALOG_MAX_QUANTITY, CUSTOM_MAX_QUANTITY, CartItem, CartOwner, ShoppingCart
from ordering.cart.items import (
    AddCatalogItemToCart,
    AddCustomItemToCart,
    IncrementCartItemQuantity,
    RemoveCartItem,
    UpdateCartItemQuantity,
)
from ordering.cart.management import DiscardMergedItems, MergeAnonymousCart
from ordering.catalog import get_catalog
from ordering.catalog.port import CatalogPort
from ordering.utils.locks import KeyedLocks, cart_locks
from pricing.custom_product.pricer import CustomProductPricer
from pricing.custom_product.specs import parse_spec, spec_to_dict
from shared.logging import log_context

logger = structlog.get_logger(__name__)

_MAX_TOKEN_LENGTH = 255


@dataclass(frozen=True)
class NewCartItem:
    """What the buyer asked to add: a catalog product or a custom product, not both."""

    quantity: int
    product_id: str | None = None
    color: str | None = None
    custom_category: str | None = None
    custom_options: dict = field(default_factory=dict)

    @property
    def is_custom(self) -> bool:
        return self.custom_category is not None


def _log_owner(owner: CartOwner) -> dict:
    # Anonymous tokens are bearer credentials and stay out of logs
    if owner.is_anonymous:
        return {"cart_owner": "anonymous"}
    return {"cart_owner": "user", "user_id": str(owner.user_id)}


def mint_anonymous_token() -> str:
    return secrets.token_urlsafe(24)


class CartIdentityResolver:
    def __init__(
        self,
        pricer: CustomProductPricer | None = None,
        catalog: CatalogPort | None = None,
        locks: KeyedLocks | None = None,
    ) -> None:
        self.pricer = pricer or CustomProductPricer()
        self.catalog = catalog
        self.locks = locks or cart_locks

    def _catalog(self) -> CatalogPort:
        return self.catalog or get_catalog()

    def _process(self, owner: CartOwner, command):
        with self.locks.hold(owner.key), log_context(**_log_owner(owner)):
            return current_domain.process(command, asynchronous=False)

    @staticmethod
    def _owner_fields(owner: CartOwner) -> dict:
        return {"user_id": owner.user_id, "anonymous_token": owner.anonymous_token}

    # -------------------------------------------------------------------
    # Owner resolution
    # -------------------------------------------------------------------
    def resolve_owner(self, session_user_id=None, anonymous_token=None) -> CartOwner:
        """Resolve the cart owner for a request.

        - user id present: the user owns the cart; a non-empty anonymous cart
          for `anonymous_token` is merged into it first
        - only a token: that token owns the cart, unless its cart expired
        - neither: a freshly minted token
        """
        if anonymous_token is not None and (not anonymous_token or len(anonymous_token) > _MAX_TOKEN_LENGTH):
            anonymous_token = None

        if session_user_id:
            owner = CartOwner(user_id=str(session_user_id))
            if anonymous_token:
                self.merge(owner.user_id, anonymous_token)
            return owner

        if anonymous_token:
            owner = CartOwner(anonymous_token=anonymous_token)
            cart = current_domain.repository_for(ShoppingCart).find_for_owner(owner)
            if cart is None or not cart.is_expired():
                return owner
            logger.info("anonymous_cart_expired", cart_id=str(cart.id))

        return CartOwner(anonymous_token=mint_anonymous_token())

    def merge(self, user_id: str, anonymous_token: str) -> int:
        """Move an anonymous cart's lines into the user's cart. Returns the number of lines merged."""
        user_key = CartOwner(user_id=user_id).key
        anonymous_key = CartOwner(anonymous_token=anonymous_token).key

        with self.locks.hold(user_key, anonymous_key), log_context(user_id=user_id, cart_owner="user"):
            merged = current_domain.process(
                MergeAnonymousCart(user_id=user_id, anonymous_token=anonymous_token),
                asynchronous=False,
            )
            current_domain.process(
                DiscardMergedItems(user_id=user_id, anonymous_token=anonymous_token),
                asynchronous=False,
            )

        return merged or 0

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, owner: CartOwner, item: NewCartItem) -> CartItem:
        if item.is_custom == bool(item.product_id):
            raise ValidationError({"item": ["Provide either a catalog product or a custom product"]})

        maximum = CUSTOM_MAX_QUANTITY if item.is_custom else CATALOG_MAX_QUANTITY
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or not 1 <= item.quantity <= maximum:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {maximum}"]})

        if item.is_custom:
            command = self._custom_item_command(owner, item)
        else:
            command = self._catalog_item_command(owner, item)

        item_id = self._process(owner, command)
        return self._find_item(owner, item_id)

    def _catalog_item_command(self, owner: CartOwner, item: NewCartItem) -> AddCatalogItemToCart:
        product = self._catalog().get_product(item.product_id)
        if product.colors and item.color not in product.colors:
            raise ValidationError({"color": [f"Colour must be one of: {', '.join(product.colors)}"]})

        return AddCatalogItemToCart(
            product_id=product.product_id,
            color=item.color,
            quantity=item.quantity,
            base_price=product.base_price,
            offer_price=product.offer_price,
            title=product.title,
            image=product.image,
            **self._owner_fields(owner),
        )

    def _custom_item_command(self, owner: CartOwner, item: NewCartItem) -> AddCustomItemToCart:
        spec = parse_spec(item.custom_category, item.custom_options, item.quantity)
        priced = self.pricer.price(spec)

        return AddCustomItemToCart(
            custom_category=spec.category.value,
            custom_spec=json.dumps(spec_to_dict(spec)),
            title=priced.title,
            image=priced.image,
            quantity=item.quantity,
            base_price=priced.amount.amount,
            offer_price=priced.amount.amount,
            **self._owner_fields(owner),
        )

    def update_quantity(self, owner: CartOwner, item_id: str, quantity: int, expected_quantity: int | None = None):
        self._process(
            owner,
            UpdateCartItemQuantity(
                item_id=item_id,
                quantity=quantity,
                expected_quantity=expected_quantity,
                **self._owner_fields(owner),
            ),
        )
        return self._find_item(owner, item_id)

    def increment_quantity(self, owner: CartOwner, item_id: str, delta: int):
        self._process(
            owner,
            IncrementCartItemQuantity(item_id=item_id, delta=delta, **self._owner_fields(owner)),
        )
        return self._find_item(owner, item_id)

    def remove_item(self, owner: CartOwner, item_id: str) -> None:
        self._process(owner, RemoveCartItem(item_id=item_id, **self._owner_fields(owner)))

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_cart(self, owner: CartOwner) -> ShoppingCart | None:
        return current_domain.repository_for(ShoppingCart).find_for_owner(owner)

    def _find_item(self, owner: CartOwner, item_id) -> CartItem:
        cart = self.get_cart(owner)
        return next(i for i in cart.items if str(i.id) == str(item_id))
