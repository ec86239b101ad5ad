"""Authentication helpers (credential check + JWT issue/validate)."""

from __future__ import annotations

import abc
import hmac
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import jwt
from fastapi import status

from ..models.auth import JWTPayload
from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

DEV_FALLBACK_SECRET = "local-dev-secret-key-123"


class AuthError(Exception):
    """Domain-specific authentication error."""

    def __init__(
        self,
        error: str,
        message: str,
        *,
        status_code: int = status.HTTP_401_UNAUTHORIZED,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}


def _resolve_secret(config: AppConfig) -> str:
    secret = config.jwt_secret_key
    if secret:
        return secret
    env = os.getenv("ENVIRONMENT", "").lower()
    if env in ("development", "dev"):
        return DEV_FALLBACK_SECRET
    raise AuthError(
        "missing_jwt_secret",
        "JWT secret is not configured.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class TokenValidator(abc.ABC):
    """Abstract base class for token validation strategies."""

    @abc.abstractmethod
    def validate(self, token: str) -> Optional[JWTPayload]:
        """
        Validate the token and return payload if valid, or None if this validator
        does not recognize the token (allow fallthrough).
        Raises AuthError if token is recognized but invalid/expired.
        """


class JWTValidator(TokenValidator):
    """Validates JWTs signed by the application secret for this issuer/audience."""

    def __init__(self, config: AppConfig, algorithm: str = "HS256"):
        self.config = config
        self.algorithm = algorithm

    def validate(self, token: str) -> Optional[JWTPayload]:
        secret = _resolve_secret(self.config)
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=self.config.jwt_audience,
                issuer=self.config.jwt_issuer,
                options={"require": ["exp", "iat", "sub", "jti", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("token_expired", "Token expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise AuthError("invalid_token", "Invalid token signature") from exc
        except jwt.DecodeError:
            # Not a JWT at all; let the service report generic invalid credentials
            return None
        except jwt.InvalidTokenError as exc:
            raise AuthError("invalid_token", f"Invalid token: {exc}") from exc
        return JWTPayload(**decoded)


class AuthService:
    """Check credentials, issue and validate tokens."""

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        algorithm: str = "HS256",
    ) -> None:
        self.config = config or get_config()
        self.algorithm = algorithm
        self.token_ttl = timedelta(minutes=self.config.token_ttl_minutes)
        self.validators: List[TokenValidator] = [JWTValidator(self.config, algorithm)]

    def authenticate(self, username: str, password: str) -> bool:
        """Compare the supplied pair with the single configured account."""
        user_ok = hmac.compare_digest(
            username.encode("utf-8"), self.config.admin_username.encode("utf-8")
        )
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), self.config.admin_password.encode("utf-8")
        )
        return user_ok and password_ok

    def validate_jwt(self, token: str) -> JWTPayload:
        """
        Validate a token against all registered strategies.
        Returns the first successful payload.
        Raises AuthError if no validator accepts it or if validation explicitly fails.
        """
        for validator in self.validators:
            payload = validator.validate(token)
            if payload:
                return payload
        raise AuthError("invalid_token", "Invalid authentication credentials")

    def _build_payload(
        self, username: str, expires_in: Optional[timedelta] = None
    ) -> JWTPayload:
        now = datetime.now(timezone.utc)
        lifetime = expires_in if expires_in is not None else self.token_ttl
        return JWTPayload(
            sub=username,
            jti=uuid.uuid4().hex,
            iss=self.config.jwt_issuer,
            aud=self.config.jwt_audience,
            iat=int(now.timestamp()),
            exp=int((now + lifetime).timestamp()),
        )

    def create_jwt(
        self, username: str, *, expires_in: Optional[timedelta] = None
    ) -> str:
        """Create a signed JWT for the given user."""
        token, _ = self.issue_token_response(username, expires_in=expires_in)
        return token

    def issue_token_response(
        self, username: str, *, expires_in: Optional[timedelta] = None
    ) -> tuple[str, datetime]:
        """Return token string and expiry timestamp (helper for API routes)."""
        payload = self._build_payload(username, expires_in)
        token = jwt.encode(
            payload.model_dump(),
            _resolve_secret(self.config),
            algorithm=self.algorithm,
        )
        expires_at = datetime.fromtimestamp(payload.exp, tz=timezone.utc)
        logger.info("Issued token", extra={"sub": username, "jti": payload.jti})
        return token, expires_at


__all__ = ["AuthService", "AuthError", "TokenValidator", "JWTValidator"]
