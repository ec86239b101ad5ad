"""Portal pages relaying student CRUD to the records API."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import RedirectResponse, Response

from ..client import ApiError, RecordsApiClient
from ..rendering import render
from ..session import (
    ERROR_MESSAGE,
    HOME_PATH,
    LoginRequired,
    SessionContext,
    end_session,
    flash,
    require_authentication,
)
from .dependencies import get_api_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/home")


def _log_api_failure(request: Request, action: str, exc: ApiError) -> None:
    """Log the API error code; an expired or rejected token ends the session."""
    logger.warning(
        "Records API call failed",
        extra={"action": action, "status": exc.status_code, "error": exc.error},
    )
    if exc.unauthorized:
        end_session(request)
        raise LoginRequired() from exc


def _back_to_index() -> RedirectResponse:
    return RedirectResponse(url=HOME_PATH, status_code=303)


@router.get("/index")
async def index(
    request: Request,
    session: SessionContext = Depends(require_authentication),
    api: RecordsApiClient = Depends(get_api_client),
):
    try:
        students = await api.list_students(session.token)
    except ApiError as exc:
        _log_api_failure(request, "list", exc)
        return render(
            request,
            "index.html",
            {"students": [], "load_error": "Unable to load student records"},
        )
    return render(request, "index.html", {"students": students})


@router.get("/addstudent")
async def add_or_edit_form(
    request: Request,
    raw_id: Optional[str] = Query(None, alias="studentID"),
    session: SessionContext = Depends(require_authentication),
    api: RecordsApiClient = Depends(get_api_client),
):
    """Blank form for an empty or zero id, otherwise the stored record prefilled."""
    try:
        student_id = int(raw_id) if raw_id and raw_id.strip() else 0
    except ValueError:
        logger.warning("Invalid student id in form link", extra={"raw_id": raw_id})
        flash(request, ERROR_MESSAGE, "danger")
        return _back_to_index()

    if not student_id:
        return render(request, "form.html", {"student": None, "is_edit": False})
    try:
        student = await api.get_student(session.token, student_id)
    except ApiError as exc:
        _log_api_failure(request, "get", exc)
        flash(request, ERROR_MESSAGE, "danger")
        return _back_to_index()
    return render(request, "form.html", {"student": student, "is_edit": True})


@router.post("/save")
async def save(
    request: Request,
    student_id: str = Form("", alias="StudentID"),
    name: str = Form("", alias="Name"),
    file_path: Optional[str] = Form(None, alias="FilePath"),
    is_edit: bool = Form(False, alias="IsEdit"),
    upload: Optional[UploadFile] = File(None, alias="File"),
    session: SessionContext = Depends(require_authentication),
    api: RecordsApiClient = Depends(get_api_client),
):
    """Forward the full record, and any attached file, to the API."""
    attachment = None
    if upload is not None and upload.filename:
        content = await upload.read()
        attachment = (upload.filename, content, upload.content_type or "application/octet-stream")

    try:
        await api.save_student(
            session.token,
            student_id=student_id,
            name=name,
            file_path=file_path,
            upload=attachment,
        )
    except ApiError as exc:
        _log_api_failure(request, "save", exc)
        flash(request, ERROR_MESSAGE, "danger")
        return _back_to_index()

    flash(request, "Record Updated Successfully" if is_edit else "Record Saved Successfully")
    return _back_to_index()


@router.post("/delete")
async def delete(
    request: Request,
    student_id: int = Form(..., alias="studentID"),
    session: SessionContext = Depends(require_authentication),
    api: RecordsApiClient = Depends(get_api_client),
):
    try:
        await api.delete_student(session.token, student_id)
    except ApiError as exc:
        _log_api_failure(request, "delete", exc)
        flash(request, ERROR_MESSAGE, "danger")
        return _back_to_index()

    flash(request, "Record Deleted Successfully")
    return _back_to_index()


@router.get("/image/{file_name}")
async def image(
    request: Request,
    file_name: str,
    session: SessionContext = Depends(require_authentication),
    api: RecordsApiClient = Depends(get_api_client),
):
    """Relay a stored image; browsers cannot attach the bearer token themselves."""
    try:
        content, media_type = await api.get_image(session.token, file_name)
    except ApiError as exc:
        _log_api_failure(request, "image", exc)
        return Response(status_code=exc.status_code)
    return Response(content=content, media_type=media_type)


__all__ = ["router"]
