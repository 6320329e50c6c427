"""Session cookie exchange.

Every response re-issues the session cookie so its one-year validity window
slides forward with each visit.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, Response

from shiritori_server.config import SessionSettings
from shiritori_server.core.sessions import SessionIdentity, SessionIdentityProvider


def set_session_cookie(response: Response, session_id: str, settings: SessionSettings) -> None:
    """Persist ``session_id`` on the client for the configured validity window."""
    response.set_cookie(
        key=settings.cookie_name,
        value=session_id,
        max_age=settings.max_age_seconds,
        expires=settings.max_age_seconds,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


def get_session(request: Request) -> SessionIdentity:
    """Return the identity resolved by :func:`install_session_middleware`."""
    return request.state.session


def install_session_middleware(
    app: FastAPI,
    settings: SessionSettings,
    provider: SessionIdentityProvider | None = None,
) -> None:
    """Resolve the session for every request and re-issue its cookie on every response."""
    provider = provider or SessionIdentityProvider()

    @app.middleware("http")
    async def session_cookie(request: Request, call_next):
        identity = provider.resolve_or_create(request.cookies.get(settings.cookie_name))
        request.state.session = identity
        response = await call_next(request)
        set_session_cookie(response, identity.session_id, settings)
        return response
