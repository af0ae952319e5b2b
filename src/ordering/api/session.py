"""Request identity as handed over by the auth layer.

Authentication itself happens upstream: a signed-in request carries the
user id in ``X-User-Id``. Anonymous shoppers are tracked through the
``guest-id`` cookie. Admin endpoints require ``X-Admin-Key``.
"""

import secrets

from fastapi import Cookie, Depends, Header, HTTPException
from protean.utils.globals import current_domain

from shared.settings import load_settings

GUEST_COOKIE = "guest-id"


def session_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def guest_token(guest_id: str | None = Cookie(default=None, alias=GUEST_COOKIE)) -> str | None:
    return guest_id or None


def require_user_id(user_id: str | None = Depends(session_user_id)) -> str:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


async def require_admin(x_admin_key: str | None = Header(default=None)) -> None:
    expected = load_settings(current_domain).admin_api_key
    if not expected or not x_admin_key or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=401, detail="Invalid admin key")
