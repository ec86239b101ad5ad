"""Request-scoped accessors for services attached to the application."""

from __future__ import annotations

from fastapi import Request

from ..services.image_store import ImageStore
from ..services.student_store import StudentStore


def get_student_store(request: Request) -> StudentStore:
    return request.app.state.student_store


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


__all__ = ["get_student_store", "get_image_store"]
