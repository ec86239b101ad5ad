"""Session helpers and the authentication guard for portal routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger(__name__)

TOKEN_KEY = "JWTToken"
USERNAME_KEY = "UserName"
FLASH_KEY = "flash"
LOGIN_PATH = "/auth/login"
HOME_PATH = "/home/index"
ERROR_MESSAGE = "Error Occured"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class LoginRequired(Exception):
    """Raised by the guard when the session carries no token."""


@dataclass(frozen=True)
class SessionContext:
    """Values of the logged-in session, passed explicitly to each handler."""

    username: str
    token: str


def require_authentication(request: Request) -> SessionContext:
    """Route dependency: the current session, or LoginRequired when logged out."""
    token = request.session.get(TOKEN_KEY)
    if not token:
        raise LoginRequired()
    return SessionContext(username=request.session.get(USERNAME_KEY, ""), token=token)


def start_session(request: Request, username: str, token: str) -> None:
    request.session[TOKEN_KEY] = token
    request.session[USERNAME_KEY] = username


def end_session(request: Request) -> None:
    request.session.clear()


def flash(request: Request, message: str, category: str = "info") -> None:
    """Queue a message for the next rendered page."""
    messages = list(request.session.get(FLASH_KEY, []))
    messages.append({"message": message, "category": category})
    request.session[FLASH_KEY] = messages


def pop_flashes(request: Request) -> List[Dict[str, str]]:
    return request.session.pop(FLASH_KEY, [])


async def login_required_handler(request: Request, exc: LoginRequired) -> Response:
    return RedirectResponse(url=LOGIN_PATH, status_code=303)


async def invalid_request_handler(request: Request, exc: RequestValidationError) -> Response:
    """Malformed form or query input: flash the generic error and go back."""
    logger.warning(
        "Rejected malformed portal request",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    if not request.session.get(TOKEN_KEY):
        return RedirectResponse(url=LOGIN_PATH, status_code=303)
    flash(request, ERROR_MESSAGE, "danger")
    return RedirectResponse(url=HOME_PATH, status_code=303)


class NoCacheWithoutTokenMiddleware(BaseHTTPMiddleware):
    """Stop browsers caching pages served to a session without a token."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if not request.session.get(TOKEN_KEY):
            response.headers.update(NO_CACHE_HEADERS)
        return response


__all__ = [
    "TOKEN_KEY",
    "USERNAME_KEY",
    "LOGIN_PATH",
    "HOME_PATH",
    "ERROR_MESSAGE",
    "NO_CACHE_HEADERS",
    "LoginRequired",
    "SessionContext",
    "require_authentication",
    "start_session",
    "end_session",
    "flash",
    "pop_flashes",
    "login_required_handler",
    "invalid_request_handler",
    "NoCacheWithoutTokenMiddleware",
]
