"""Cart item management: commands and handler.

Every command names the owner (user id or anonymous token) rather than a
cart id: an item id is only honoured inside its owner's cart, so one owner
can never touch another owner's lines.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import CartOwner, ShoppingCart
from ordering.domain import ordering
from shared.settings import load_settings


@ordering.command(part_of="ShoppingCart")
class AddCatalogItemToCart:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    product_id = Identifier(required=True)
    color = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    base_price = Float(required=True, min_value=0.0)
    offer_price = Float(required=True, min_value=0.0)
    title = String(max_length=255)
    image = String(max_length=255)


@ordering.command(part_of="ShoppingCart")
class AddCustomItemToCart:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    custom_category = String(required=True, max_length=20)
    custom_spec = Text(required=True)  # JSON: {category, quantity, options}
    title = String(required=True, max_length=255)
    image = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    base_price = Float(required=True, min_value=0.0)
    offer_price = Float(required=True, min_value=0.0)


@ordering.command(part_of="ShoppingCart")
class UpdateCartItemQuantity:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    expected_quantity = Integer()  # Optimistic check against the stored quantity


@ordering.command(part_of="ShoppingCart")
class IncrementCartItemQuantity:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    item_id = Identifier(required=True)
    delta = Integer(required=True)


@ordering.command(part_of="ShoppingCart")
class RemoveCartItem:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    item_id = Identifier(required=True)


def _owner(command) -> CartOwner:
    return CartOwner(user_id=command.user_id, anonymous_token=command.anonymous_token)


def _ttl_days() -> int:
    return load_settings(current_domain).anonymous_cart_ttl_days


def _load_or_create(repo, owner: CartOwner) -> ShoppingCart:
    cart = repo.find_for_owner(owner)
    if cart is None:
        cart = ShoppingCart.create(owner, ttl_days=_ttl_days())
    return cart


def _load_existing(repo, owner: CartOwner) -> ShoppingCart:
    cart = repo.find_for_owner(owner)
    if cart is None:
        raise ObjectNotFoundError({"item_id": ["Item not found in cart"]})
    return cart


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddCatalogItemToCart)
    def add_catalog_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_or_create(repo, _owner(command))
        item = cart.add_catalog_item(
            product_id=command.product_id,
            color=command.color,
            quantity=command.quantity,
            base_price=command.base_price,
            offer_price=command.offer_price,
            title=command.title,
            image=command.image,
            ttl_days=_ttl_days(),
        )
        repo.add(cart)
        return str(item.id)

    @handle(AddCustomItemToCart)
    def add_custom_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_or_create(repo, _owner(command))
        item = cart.add_custom_item(
            custom_category=command.custom_category,
            custom_spec=command.custom_spec,
            title=command.title,
            image=command.image,
            quantity=command.quantity,
            base_price=command.base_price,
            offer_price=command.offer_price,
            ttl_days=_ttl_days(),
        )
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItemQuantity)
    def update_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_existing(repo, _owner(command))
        item = cart.update_item_quantity(
            item_id=command.item_id,
            quantity=command.quantity,
            expected_quantity=command.expected_quantity,
            ttl_days=_ttl_days(),
        )
        repo.add(cart)
        return str(item.id)

    @handle(IncrementCartItemQuantity)
    def increment_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_existing(repo, _owner(command))
        item = cart.increment_item_quantity(
            item_id=command.item_id,
            delta=command.delta,
            ttl_days=_ttl_days(),
        )
        repo.add(cart)
        return str(item.id)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_existing(repo, _owner(command))
        cart.remove_item(item_id=command.item_id, ttl_days=_ttl_days())
        repo.add(cart)
