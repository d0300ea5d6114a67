"""FastAPI dependency providers shared by the routers."""

import uuid

from fastapi import Cookie, Depends, Header, Response

from services.delivery_api import DeliveryApi, get_delivery_api
from services.maps import GeoapifyProvider, get_provider
from services.quote_session import QuoteSession, QuoteSessionStore

SESSION_COOKIE = "courier_session"

_store: QuoteSessionStore | None = None


def get_session_store() -> QuoteSessionStore:
    global _store
    if _store is None:
        _store = QuoteSessionStore(get_provider())
    return _store


def reset_session_store() -> None:
    global _store
    _store = None


def get_quote_session(
    response: Response,
    x_session_id: str | None = Header(None),
    session_cookie: str | None = Cookie(None, alias=SESSION_COOKIE),
    store: QuoteSessionStore = Depends(get_session_store),
) -> QuoteSession:
    """
    Quote session of the current visitor.

    The X-Session-Id header wins (the bot sends one per Telegram user);
    browsers are tracked by a cookie issued on their first request.
    """
    session_id = (x_session_id or "").strip() or (session_cookie or "").strip()
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return store.get(session_id)


def get_maps() -> GeoapifyProvider | None:
    return get_provider()


def get_backend() -> DeliveryApi:
    return get_delivery_api()
