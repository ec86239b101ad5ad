"""Pydantic models for data validation and serialization."""

from .auth import JWTPayload, LoginRequest, TokenResponse
from .student import StudentRecord

__all__ = [
    "StudentRecord",
    "LoginRequest",
    "TokenResponse",
    "JWTPayload",
]
