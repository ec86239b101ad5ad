"""Login route issuing bearer tokens."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...models.auth import LoginRequest, TokenResponse
from ...services.auth import AuthError, AuthService
from ..middleware import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange the configured username/password pair for a JWT."""
    if not auth_service.authenticate(credentials.username, credentials.password):
        logger.warning("Login rejected", extra={"username": credentials.username})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_credentials", "message": "Invalid username or password"},
        )

    try:
        token, expires_at = auth_service.issue_token_response(credentials.username)
    except AuthError as exc:
        raise HTTPException(
            status_code=exc.status_code,
            detail={"error": exc.error, "message": exc.message},
        ) from exc

    logger.info("Login succeeded", extra={"username": credentials.username})
    return TokenResponse(token=token, token_type="bearer", expires_at=expires_at)


__all__ = ["router"]
