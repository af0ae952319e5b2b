"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

import json

from pydantic import Field, model_validator

from ordering.cart.cart import CartItem
from ordering.quote.quote import QuoteRequest
from shared.schemas import CamelModel


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CustomProductSchema(CamelModel):
    category: str = Field(min_length=1)
    options: dict = Field(default_factory=dict)


class AddCartItemRequest(CamelModel):
    quantity: int
    color: str | None = None
    product_id: str | None = None
    custom_product: CustomProductSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "quantity": 10,
                    "color": None,
                    "customProduct": {
                        "category": "fastener",
                        "options": {"fastenerType": "Bolt", "size": "M8", "length": "20", "material": "Steel"},
                    },
                }
            ]
        }
    }

    @model_validator(mode="after")
    def product_or_custom_product(self):
        if bool(self.product_id) == (self.custom_product is not None):
            raise ValueError("Either productId or customProduct must be provided")
        return self


class UpdateCartItemRequest(CamelModel):
    item_id: str
    quantity: int | None = None
    expected_quantity: int | None = None
    delta: int | None = None

    @model_validator(mode="after")
    def quantity_or_delta(self):
        if (self.quantity is None) == (self.delta is None):
            raise ValueError("Provide either quantity or delta")
        if self.delta is not None and self.expected_quantity is not None:
            raise ValueError("expectedQuantity only applies to an absolute quantity")
        return self


# ---------------------------------------------------------------------------
# Cart Response Schemas
# ---------------------------------------------------------------------------
class CartItemSchema(CamelModel):
    id: str
    product_id: str | None = None
    color: str | None = None
    custom_product: CustomProductSchema | None = None
    quote_id: str | None = None
    title: str | None = None
    image: str | None = None
    quantity: int
    base_price: float
    offer_price: float
    line_total: float
    display_price: float
    formatted_price: str

    @classmethod
    def from_item(cls, item: CartItem, converter, currency: str) -> "CartItemSchema":
        custom = None
        if item.is_custom:
            custom = CustomProductSchema(category=item.custom_category, options=item.options)
        return cls(
            id=str(item.id),
            product_id=str(item.product_id) if item.product_id else None,
            color=item.color,
            custom_product=custom,
            quote_id=str(item.quote_id) if item.quote_id else None,
            title=item.title,
            image=item.image,
            quantity=item.quantity,
            base_price=item.base_price,
            offer_price=item.offer_price,
            line_total=item.line_total,
            display_price=round(converter.to_display(item.line_total, currency), 2),
            formatted_price=converter.format(item.line_total, currency),
        )


class CartItemResponse(CamelModel):
    success: bool = True
    item: CartItemSchema


class CartResponse(CamelModel):
    success: bool = True
    items: list[CartItemSchema]
    currency: str
    subtotal: float
    display_subtotal: float
    formatted_subtotal: str


# ---------------------------------------------------------------------------
# Quote Schemas
# ---------------------------------------------------------------------------
class QuoteItemRequest(CamelModel):
    type: str | None = None
    category_name: str | None = None
    specifications: dict | None = None
    quantity: int | None = None


class SubmitQuoteRequestBody(CamelModel):
    items: list[QuoteItemRequest] | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {
                            "type": "fastener",
                            "categoryName": "Bolt",
                            "specifications": {"size": "M8", "material": "Steel"},
                            "quantity": 10,
                        }
                    ],
                    "notes": "Need zinc plating",
                }
            ]
        }
    }


class QuoteItemSchema(CamelModel):
    id: str
    type: str
    category_name: str
    title: str | None = None
    specifications: dict
    quantity: int


class QuoteSchema(CamelModel):
    id: str
    user_id: str
    items: list[QuoteItemSchema]
    notes: str | None = None
    total_items: int
    status: str
    email_sent: bool
    email_opened: bool
    response_received: bool
    notification_attempts: int
    quoted_price: float | None = None
    admin_response: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_quote(cls, quote: QuoteRequest) -> "QuoteSchema":
        return cls(
            id=str(quote.id),
            user_id=str(quote.user_id),
            items=[
                QuoteItemSchema(
                    id=str(item.id),
                    type=item.item_type,
                    category_name=item.category_name,
                    title=item.title,
                    specifications=json.loads(item.specifications) if item.specifications else {},
                    quantity=item.quantity,
                )
                for item in quote.items
            ],
            notes=quote.notes,
            total_items=quote.total_items or 0,
            status=quote.status,
            email_sent=bool(quote.email_sent),
            email_opened=bool(quote.email_opened),
            response_received=bool(quote.response_received),
            notification_attempts=quote.notification_attempts or 0,
            quoted_price=quote.quoted_price,
            admin_response=quote.admin_response,
            created_at=quote.created_at.isoformat() if quote.created_at else None,
            updated_at=quote.updated_at.isoformat() if quote.updated_at else None,
        )


class QuoteSubmittedResponse(CamelModel):
    success: bool = True
    quote_id: str
    email_sent: bool
    message: str = "Quote request submitted successfully"


class QuoteResponse(CamelModel):
    success: bool = True
    quote: QuoteSchema


class QuoteListResponse(CamelModel):
    success: bool = True
    quotes: list[QuoteSchema]


class QuoteAcceptedResponse(CamelModel):
    success: bool = True
    quote_id: str
    status: str
    cart_item_ids: list[str]


class MarkQuotedRequest(CamelModel):
    quoted_price: float | None = Field(default=None, ge=0)
    admin_response: str | None = None
