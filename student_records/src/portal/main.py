"""FastAPI application for the session-based student records portal."""

from __future__ import annotations

import logging
import secrets

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from ..services.config import AppConfig, get_config
from .client import RecordsApiClient
from .routes import auth, home
from .session import (
    LoginRequired,
    NoCacheWithoutTokenMiddleware,
    invalid_request_handler,
    login_required_handler,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "student_records_session"


def create_app(
    config: AppConfig | None = None,
    *,
    api_client: RecordsApiClient | None = None,
) -> FastAPI:
    """Build the portal application talking to the records API."""
    config = config or get_config()

    session_secret = config.session_secret_key
    if not session_secret:
        logger.warning("SESSION_SECRET_KEY not set; sessions will not survive a restart")
        session_secret = secrets.token_urlsafe(32)

    app = FastAPI(
        title="Student Records Portal",
        description="Browser front end relaying session tokens to the records API",
        version="0.1.0",
    )
    app.state.config = config
    app.state.api_client = api_client or RecordsApiClient(
        config.api_base_url,
        timeout=config.api_timeout_seconds,
        retries=config.api_retries,
    )

    # Session must wrap the cache guard so the guard can read the session.
    app.add_middleware(NoCacheWithoutTokenMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie=SESSION_COOKIE,
        same_site="lax",
    )
    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(RequestValidationError, invalid_request_handler)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(home.router, tags=["home"])

    @app.get("/")
    async def root():
        return RedirectResponse(url="/home/index", status_code=303)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    logger.info("Portal configured", extra={"api_base_url": config.api_base_url})
    return app


__all__ = ["create_app", "SESSION_COOKIE"]
