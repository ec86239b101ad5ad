"""Portal login and logout pages."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from ..client import ApiError, RecordsApiClient
from ..rendering import render
from ..session import LOGIN_PATH, TOKEN_KEY, end_session, start_session
from .dependencies import get_api_client

logger = logging.getLogger(__name__)

router = APIRouter()

LOGIN_FAILED_MESSAGE = "Invalid username or password"


@router.get("/auth/login")
async def login_form(request: Request):
    if request.session.get(TOKEN_KEY):
        return RedirectResponse(url="/home/index", status_code=303)
    return render(request, "login.html")


@router.post("/auth/login")
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    api: RecordsApiClient = Depends(get_api_client),
):
    """Authenticate against the API and keep the returned token in the session."""
    try:
        token = await api.login(username, password)
    except ApiError as exc:
        logger.info(
            "Portal login failed",
            extra={"username": username, "status": exc.status_code, "error": exc.error},
        )
        return render(
            request,
            "login.html",
            {"error": LOGIN_FAILED_MESSAGE, "entered_username": username},
        )

    start_session(request, username, token)
    logger.info("Portal login succeeded", extra={"username": username})
    return RedirectResponse(url="/home/index", status_code=303)


@router.get("/auth/logout")
async def logout(request: Request):
    end_session(request)
    return RedirectResponse(url=LOGIN_PATH, status_code=303)


__all__ = ["router"]
