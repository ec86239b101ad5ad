"""Request-scoped accessors for portal services."""

from __future__ import annotations

from fastapi import Request

from ..client import RecordsApiClient


def get_api_client(request: Request) -> RecordsApiClient:
    return request.app.state.api_client


__all__ = ["get_api_client"]
