"""Repository for the ShoppingCart aggregate."""

from ordering.cart.cart import CartOwner, ShoppingCart
from ordering.domain import ordering


@ordering.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_for_owner(self, owner: CartOwner) -> ShoppingCart | None:
        """The owner's cart, or None if it has not been created yet."""
        if owner.user_id:
            results = self._dao.query.filter(user_id=str(owner.user_id)).all().items
        else:
            results = self._dao.query.filter(anonymous_token=owner.anonymous_token).all().items
        return results[0] if results else None
