"""Shopping Cart aggregate: one cart per owner, catalog or custom line items.

A cart belongs to exactly one owner, either a signed-in user or an anonymous
token. Anonymous carts expire after a sliding TTL and are absorbed into the
user's cart on sign-in.

Line items reference either a catalog product (+ colour) or embed a priced
custom product spec, never both. Catalog lines carry unit prices snapshotted
from the catalog; custom lines carry the price of the whole spec, so their
prices scale with quantity. Custom lines also keep the unrounded per-unit
price they were added at, and every quantity change is priced from it.
"""

import json
from datetime import UTC, datetime, timedelta

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.cart.events import (
    AnonymousCartMerged,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
)
from ordering.domain import ordering
from shared.exceptions import ConflictError

CATALOG_MAX_QUANTITY = 10
CUSTOM_MAX_QUANTITY = 100


@ordering.value_object
class CartOwner:
    """Who a cart belongs to: a user id or an anonymous token, exactly one."""

    user_id = Identifier()
    anonymous_token = String(max_length=255)

    @invariant.post
    def exactly_one_identity(self):
        if bool(self.user_id) == bool(self.anonymous_token):
            raise ValidationError({"owner": ["A cart owner is either a user or an anonymous token"]})

    @property
    def is_anonymous(self) -> bool:
        return not self.user_id

    @property
    def key(self) -> str:
        return f"user:{self.user_id}" if self.user_id else f"anon:{self.anonymous_token}"


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    # Catalog reference
    product_id = Identifier()
    color = String(max_length=50)

    # Embedded custom product
    custom_category = String(max_length=20)
    custom_spec = Text()  # JSON: {category, quantity, options}
    quote_id = Identifier()  # Set when the line came from an accepted quote

    # Display payload
    title = String(max_length=255)
    image = String(max_length=255)

    quantity = Integer(required=True, min_value=1)
    base_price = Float(required=True, min_value=0.0)
    offer_price = Float(required=True, min_value=0.0)
    unit_base_price = Float(min_value=0.0)  # Custom lines only
    unit_offer_price = Float(min_value=0.0)  # Custom lines only
    added_at = DateTime()

    @property
    def is_custom(self) -> bool:
        return bool(self.custom_category)

    @property
    def max_quantity(self) -> int:
        return CUSTOM_MAX_QUANTITY if self.is_custom else CATALOG_MAX_QUANTITY

    @property
    def line_total(self) -> float:
        if self.is_custom:
            return self.offer_price
        return round(self.offer_price * self.quantity, 2)

    @property
    def options(self) -> dict:
        if not self.custom_spec:
            return {}
        return json.loads(self.custom_spec).get("options", {})

    @property
    def unit_prices(self) -> tuple[float, float]:
        """Per-unit (base, offer) of a custom line; older rows fall back to the line prices."""
        if self.unit_base_price is not None and self.unit_offer_price is not None:
            return self.unit_base_price, self.unit_offer_price
        return self.base_price / self.quantity, self.offer_price / self.quantity

    def snapshot(self) -> dict:
        """Field values needed to recreate this line in another cart."""
        return {
            "product_id": str(self.product_id) if self.product_id else None,
            "color": self.color,
            "custom_category": self.custom_category,
            "custom_spec": self.custom_spec,
            "quote_id": str(self.quote_id) if self.quote_id else None,
            "title": self.title,
            "image": self.image,
            "quantity": self.quantity,
            "base_price": self.base_price,
            "offer_price": self.offer_price,
            "unit_base_price": self.unit_base_price,
            "unit_offer_price": self.unit_offer_price,
        }


@ordering.aggregate
class ShoppingCart:
    user_id = Identifier()
    anonymous_token = String(max_length=255)
    items = HasMany(CartItem)
    merged_item_ids = Text()  # JSON array of anonymous line ids already copied in
    expires_at = DateTime()  # Anonymous carts only
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def owned_by_exactly_one_identity(self):
        if bool(self.user_id) == bool(self.anonymous_token):
            raise ValidationError({"owner": ["A cart belongs to either a user or an anonymous token"]})

    @invariant.post
    def items_reference_catalog_or_custom_product(self):
        for item in self.items:
            if bool(item.product_id) == bool(item.custom_category):
                raise ValidationError(
                    {"items": ["A cart item references either a catalog product or a custom product, never both"]}
                )

    @invariant.post
    def item_quantities_within_bounds(self):
        for item in self.items:
            if not 1 <= item.quantity <= item.max_quantity:
                raise ValidationError({"quantity": [f"Quantity must be between 1 and {item.max_quantity}"]})

    @invariant.post
    def offer_price_never_above_base_price(self):
        for item in self.items:
            if item.offer_price > item.base_price:
                raise ValidationError({"offer_price": ["Offer price cannot exceed base price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner: CartOwner, ttl_days: int = 30):
        now = datetime.now(UTC)
        return cls(
            user_id=owner.user_id,
            anonymous_token=owner.anonymous_token,
            merged_item_ids=json.dumps([]),
            expires_at=now + timedelta(days=ttl_days) if owner.is_anonymous else None,
            created_at=now,
            updated_at=now,
        )

    @property
    def owner(self) -> CartOwner:
        return CartOwner(user_id=self.user_id, anonymous_token=self.anonymous_token)

    @property
    def subtotal(self) -> float:
        return round(sum(item.line_total for item in self.items), 2)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.user_id or self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def _touch(self, ttl_days: int | None = None) -> datetime:
        now = datetime.now(UTC)
        self.updated_at = now
        if self.anonymous_token and ttl_days:
            self.expires_at = now + timedelta(days=ttl_days)
        return now

    def _item(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError({"item_id": ["Item not found in cart"]})
        return item

    @staticmethod
    def _check_quantity(quantity: int, maximum: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or not 1 <= quantity <= maximum:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {maximum}"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_catalog_item(
        self,
        product_id,
        quantity,
        base_price,
        offer_price,
        color=None,
        title=None,
        image=None,
        ttl_days=None,
    ) -> CartItem:
        """Add a catalog product, or increase the line for the same product and colour."""
        self._check_quantity(quantity, CATALOG_MAX_QUANTITY)
        if offer_price > base_price:
            raise ValidationError({"offer_price": ["Offer price cannot exceed base price"]})

        existing = next(
            (
                i
                for i in self.items
                if not i.is_custom and str(i.product_id) == str(product_id) and (i.color or None) == (color or None)
            ),
            None,
        )

        if existing is not None:
            if existing.quantity + quantity > CATALOG_MAX_QUANTITY:
                raise ValidationError(
                    {"quantity": [f"Maximum quantity of {CATALOG_MAX_QUANTITY} reached for this item"]}
                )
            previous = existing.quantity
            existing.quantity = previous + quantity
            self._touch(ttl_days)
            self.raise_(
                CartItemQuantityChanged(
                    cart_id=str(self.id),
                    item_id=str(existing.id),
                    previous_quantity=previous,
                    new_quantity=existing.quantity,
                )
            )
            return existing

        now = self._touch(ttl_days)
        item = CartItem(
            product_id=product_id,
            color=color,
            title=title,
            image=image,
            quantity=quantity,
            base_price=base_price,
            offer_price=offer_price,
            added_at=now,
        )
        self.add_items(item)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
            )
        )
        return item

    def add_custom_item(
        self,
        custom_category,
        custom_spec,
        title,
        image,
        quantity,
        base_price,
        offer_price,
        quote_id=None,
        ttl_days=None,
    ) -> CartItem:
        """Append a priced custom product. Custom lines are never combined."""
        self._check_quantity(quantity, CUSTOM_MAX_QUANTITY)
        if offer_price > base_price:
            raise ValidationError({"offer_price": ["Offer price cannot exceed base price"]})

        now = self._touch(ttl_days)
        item = CartItem(
            custom_category=custom_category,
            custom_spec=custom_spec if isinstance(custom_spec, str) else json.dumps(custom_spec),
            quote_id=quote_id,
            title=title,
            image=image,
            quantity=quantity,
            base_price=base_price,
            offer_price=offer_price,
            unit_base_price=base_price / quantity,
            unit_offer_price=offer_price / quantity,
            added_at=now,
        )
        self.add_items(item)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                custom_category=custom_category,
                quantity=quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity, expected_quantity=None, ttl_days=None) -> CartItem:
        """Set an absolute quantity.

        When `expected_quantity` is given it must match the stored quantity,
        otherwise another writer got there first and ``ConflictError`` is raised.
        """
        item = self._item(item_id)
        if expected_quantity is not None and item.quantity != expected_quantity:
            raise ConflictError(
                {"quantity": [f"Quantity changed to {item.quantity} since it was read as {expected_quantity}"]}
            )
        self._check_quantity(quantity, item.max_quantity)
        return self._set_quantity(item, quantity, ttl_days)

    def increment_item_quantity(self, item_id, delta, ttl_days=None) -> CartItem:
        """Change quantity relative to the stored value."""
        if not isinstance(delta, int) or isinstance(delta, bool) or delta == 0:
            raise ValidationError({"delta": ["Delta must be a non-zero integer"]})
        item = self._item(item_id)
        new_quantity = item.quantity + delta
        self._check_quantity(new_quantity, item.max_quantity)
        return self._set_quantity(item, new_quantity, ttl_days)

    def _set_quantity(self, item: CartItem, quantity: int, ttl_days=None) -> CartItem:
        previous = item.quantity
        if quantity == previous:
            return item

        with atomic_change(self):
            if item.is_custom:
                unit_base, unit_offer = item.unit_prices
                item.base_price = round(unit_base * quantity, 2)
                item.offer_price = min(round(unit_offer * quantity, 2), item.base_price)
                spec = json.loads(item.custom_spec) if item.custom_spec else {}
                spec["quantity"] = quantity
                item.custom_spec = json.dumps(spec)
            item.quantity = quantity

        self._touch(ttl_days)
        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, item_id, ttl_days=None) -> None:
        item = self._item(item_id)
        self.remove_items(item)
        self._touch(ttl_days)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    # -------------------------------------------------------------------
    # Merging (anonymous -> user)
    # -------------------------------------------------------------------
    def has_absorbed(self, item_id) -> bool:
        return str(item_id) in json.loads(self.merged_item_ids or "[]")

    def absorb(self, lines: dict[str, dict]) -> int:
        """Append copies of anonymous lines, keyed by their id in the anonymous cart.

        A line is copied at most once; lines copied by an earlier merge are
        skipped, so replaying a merge whose cleanup never ran adds nothing
        twice and still picks up lines added since.
        """
        if not self.user_id:
            raise ValidationError({"owner": ["Only a user cart can absorb an anonymous cart"]})

        merged = json.loads(self.merged_item_ids or "[]")
        fresh = {str(item_id): data for item_id, data in lines.items() if str(item_id) not in merged}
        if not fresh:
            return 0

        now = datetime.now(UTC)
        with atomic_change(self):
            for item_id, data in fresh.items():
                self.add_items(CartItem(added_at=now, **data))
                merged.append(item_id)
            self.merged_item_ids = json.dumps(merged)
            self.updated_at = now

        self.raise_(AnonymousCartMerged(cart_id=str(self.id), items_merged_count=len(fresh)))
        return len(fresh)

    def discard_items(self, item_ids) -> int:
        """Remove the given lines; ids not in this cart are ignored."""
        wanted = {str(item_id) for item_id in item_ids}
        doomed = [item for item in self.items if str(item.id) in wanted]
        if not doomed:
            return 0

        with atomic_change(self):
            for item in doomed:
                self.remove_items(item)
            self.updated_at = datetime.now(UTC)

        for item in doomed:
            self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item.id)))
        return len(doomed)
