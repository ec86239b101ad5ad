"""Authentication models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    username: str = Field(..., min_length=1, description="Account name")
    password: str = Field(..., min_length=1, description="Plain-text password")


class TokenResponse(BaseModel):
    """JWT issuance response."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always bearer)")
    expires_at: datetime = Field(..., description="Expiration timestamp")


class JWTPayload(BaseModel):
    """JWT claims payload."""

    sub: str = Field(..., description="Subject (username)")
    jti: str = Field(..., description="Unique token identifier")
    iss: str = Field(..., description="Issuer")
    aud: str = Field(..., description="Audience")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")


__all__ = ["LoginRequest", "TokenResponse", "JWTPayload"]
