"""Jinja2 template rendering for portal pages."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from ..models.student import StudentRecord
from .session import USERNAME_KEY, pop_flashes

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def image_link(record: StudentRecord) -> Optional[str]:
    """Portal URL that relays the record's image with the session token."""
    if not record.image_path:
        return None
    file_name = PurePosixPath(urlparse(record.image_path).path).name
    return f"/home/image/{file_name}" if file_name else None


templates.env.globals["image_link"] = image_link


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    *,
    status_code: int = 200,
) -> Response:
    page = {
        "username": request.session.get(USERNAME_KEY),
        "messages": pop_flashes(request),
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)


__all__ = ["templates", "render", "image_link"]
