"""FastAPI routes for the Ordering domain: cart, quote requests, quote admin."""

from fastapi import APIRouter, Depends, Query, Response
from fastapi.concurrency import run_in_threadpool
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddCartItemRequest,
    CartItemResponse,
    CartItemSchema,
    CartResponse,
    MarkQuotedRequest,
    QuoteAcceptedResponse,
    QuoteListResponse,
    QuoteResponse,
    QuoteSchema,
    QuoteSubmittedResponse,
    SubmitQuoteRequestBody,
    UpdateCartItemRequest,
)
from ordering.api.session import GUEST_COOKIE, guest_token, require_admin, require_user_id, session_user_id
from ordering.cart.cart import CartOwner
from ordering.cart.identity import CartIdentityResolver, NewCartItem
from ordering.quote.lifecycle import QuoteLifecycleManager
from ordering.quote.quote import QuoteStatus
from pricing.currency import get_converter
from shared.schemas import StatusResponse
from shared.settings import load_settings


def _sync_guest_cookie(response: Response, owner: CartOwner, guest_id: str | None) -> None:
    """Drop the guest cookie once the user is known; (re)issue it for anonymous owners."""
    if owner.user_id:
        if guest_id:
            response.delete_cookie(GUEST_COOKIE)
    elif owner.anonymous_token != guest_id:
        ttl_days = load_settings(current_domain).anonymous_cart_ttl_days
        response.set_cookie(
            GUEST_COOKIE,
            owner.anonymous_token,
            max_age=ttl_days * 24 * 60 * 60,
            httponly=True,
            samesite="lax",
        )


def _resolve(response: Response, user_id: str | None, guest_id: str | None) -> CartOwner:
    owner = CartIdentityResolver().resolve_owner(session_user_id=user_id, anonymous_token=guest_id)
    _sync_guest_cookie(response, owner, guest_id)
    return owner


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(
    response: Response,
    currency: str | None = Query(default=None, min_length=3, max_length=3),
    user_id: str | None = Depends(session_user_id),
    guest_id: str | None = Depends(guest_token),
) -> CartResponse:
    owner = _resolve(response, user_id, guest_id)
    cart = CartIdentityResolver().get_cart(owner)

    converter = get_converter()
    currency = (currency or converter.canonical).upper()
    if currency != converter.canonical:
        await run_in_threadpool(converter.refresh_if_stale)

    items = list(cart.items) if cart else []
    subtotal = cart.subtotal if cart else 0.0
    return CartResponse(
        items=[CartItemSchema.from_item(item, converter, currency) for item in items],
        currency=currency,
        subtotal=subtotal,
        display_subtotal=round(converter.to_display(subtotal, currency), 2),
        formatted_subtotal=converter.format(subtotal, currency),
    )


@cart_router.post("", status_code=201, response_model=CartItemResponse)
async def add_cart_item(
    body: AddCartItemRequest,
    response: Response,
    user_id: str | None = Depends(session_user_id),
    guest_id: str | None = Depends(guest_token),
) -> CartItemResponse:
    owner = _resolve(response, user_id, guest_id)

    if body.custom_product is not None:
        new_item = NewCartItem(
            quantity=body.quantity,
            custom_category=body.custom_product.category,
            custom_options=body.custom_product.options,
        )
    else:
        new_item = NewCartItem(quantity=body.quantity, product_id=body.product_id, color=body.color)

    item = CartIdentityResolver().add_item(owner, new_item)
    converter = get_converter()
    return CartItemResponse(item=CartItemSchema.from_item(item, converter, converter.canonical))


@cart_router.patch("", response_model=CartItemResponse)
async def update_cart_item(
    body: UpdateCartItemRequest,
    response: Response,
    user_id: str | None = Depends(session_user_id),
    guest_id: str | None = Depends(guest_token),
) -> CartItemResponse:
    owner = _resolve(response, user_id, guest_id)
    resolver = CartIdentityResolver()

    if body.delta is not None:
        item = resolver.increment_quantity(owner, body.item_id, body.delta)
    else:
        item = resolver.update_quantity(owner, body.item_id, body.quantity, expected_quantity=body.expected_quantity)

    converter = get_converter()
    return CartItemResponse(item=CartItemSchema.from_item(item, converter, converter.canonical))


@cart_router.delete("/{item_id}", response_model=StatusResponse)
async def remove_cart_item(
    item_id: str,
    response: Response,
    user_id: str | None = Depends(session_user_id),
    guest_id: str | None = Depends(guest_token),
) -> StatusResponse:
    owner = _resolve(response, user_id, guest_id)
    CartIdentityResolver().remove_item(owner, item_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Quote Router
# ---------------------------------------------------------------------------
quote_router = APIRouter(prefix="/quote-request", tags=["quotes"])


@quote_router.post("", status_code=201, response_model=QuoteSubmittedResponse)
async def submit_quote_request(
    body: SubmitQuoteRequestBody,
    user_id: str = Depends(require_user_id),
) -> QuoteSubmittedResponse:
    items = [item.model_dump(by_alias=True) for item in body.items] if body.items else []
    quote = QuoteLifecycleManager().submit(user_id, items, notes=body.notes)
    return QuoteSubmittedResponse(quote_id=str(quote.id), email_sent=bool(quote.email_sent))


@quote_router.get("", response_model=QuoteListResponse)
async def list_quote_requests(user_id: str = Depends(require_user_id)) -> QuoteListResponse:
    quotes = QuoteLifecycleManager().list_for_user(user_id)
    return QuoteListResponse(quotes=[QuoteSchema.from_quote(q) for q in quotes])


@quote_router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote_request(quote_id: str, user_id: str = Depends(require_user_id)) -> QuoteResponse:
    quote = QuoteLifecycleManager().get(quote_id, user_id)
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))


@quote_router.post("/{quote_id}/accept", response_model=QuoteAcceptedResponse)
async def accept_quote(quote_id: str, user_id: str = Depends(require_user_id)) -> QuoteAcceptedResponse:
    item_ids = QuoteLifecycleManager().accept(quote_id, user_id)
    return QuoteAcceptedResponse(quote_id=quote_id, status=QuoteStatus.ACCEPTED.value, cart_item_ids=item_ids)


@quote_router.post("/{quote_id}/reject", response_model=QuoteResponse)
async def reject_quote(quote_id: str, user_id: str = Depends(require_user_id)) -> QuoteResponse:
    quote = QuoteLifecycleManager().reject(quote_id, user_id)
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))


# ---------------------------------------------------------------------------
# Quote Admin Router
# ---------------------------------------------------------------------------
quote_admin_router = APIRouter(
    prefix="/admin/quote-requests",
    tags=["quote-admin"],
    dependencies=[Depends(require_admin)],
)


@quote_admin_router.put("/{quote_id}/quote", response_model=QuoteResponse)
async def mark_quote_quoted(quote_id: str, body: MarkQuotedRequest) -> QuoteResponse:
    quote = QuoteLifecycleManager().mark_quoted(
        quote_id,
        admin_price=body.quoted_price,
        admin_response=body.admin_response,
    )
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))


@quote_admin_router.put("/{quote_id}/email-opened", response_model=QuoteResponse)
async def record_email_opened(quote_id: str) -> QuoteResponse:
    quote = QuoteLifecycleManager().record_email_opened(quote_id)
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))


@quote_admin_router.put("/{quote_id}/response-received", response_model=QuoteResponse)
async def record_response_received(quote_id: str) -> QuoteResponse:
    quote = QuoteLifecycleManager().record_response_received(quote_id)
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))


@quote_admin_router.post("/{quote_id}/notify", response_model=QuoteResponse)
async def retry_quote_notification(quote_id: str) -> QuoteResponse:
    quote = QuoteLifecycleManager().retry_notification(quote_id)
    return QuoteResponse(quote=QuoteSchema.from_quote(quote))
