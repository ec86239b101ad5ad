"""HTTP API routes for student records and their images."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import Response
from pydantic import ValidationError

from ...models.student import StudentRecord
from ...services.image_store import ImageDeleteResult, ImageStore
from ...services.student_store import RecordNotFoundError, StudentStore
from ..dependencies import get_image_store, get_student_store
from ..middleware import get_auth_context

logger = logging.getLogger(__name__)

# Every route here requires a valid bearer token.
router = APIRouter(dependencies=[Depends(get_auth_context)])

# Stored images are always served as JPEG, whatever their real format.
IMAGE_MEDIA_TYPE = "image/jpeg"


def get_base_url(request: Request) -> str:
    """Scheme and host the client used to reach us, honouring X-Forwarded-Proto."""
    forwarded_proto = request.headers.get("x-forwarded-proto")
    scheme = forwarded_proto if forwarded_proto else str(request.url.scheme)
    hostname = str(request.url.hostname)
    port = request.url.port
    if port and port not in (80, 443):
        return f"{scheme}://{hostname}:{port}"
    return f"{scheme}://{hostname}"


def _not_found(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": error, "message": message},
    )


def _bad_request(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error, "message": message},
    )


@router.get("/home/index", response_model=List[StudentRecord])
async def list_students(store: StudentStore = Depends(get_student_store)):
    """Return every stored record."""
    return store.list()


@router.get("/home/getstudentbyid", response_model=StudentRecord)
async def get_student_by_id(
    student_id: int = Query(..., alias="studentID"),
    store: StudentStore = Depends(get_student_store),
):
    """Return the one record with the given id."""
    try:
        return store.get(student_id)
    except RecordNotFoundError as exc:
        raise _not_found("not_found", str(exc)) from exc


@router.post("/home/save", response_model=StudentRecord)
async def save_student(
    request: Request,
    student_id: int = Form(..., alias="StudentID"),
    name: str = Form(..., alias="Name"),
    file_path: Optional[str] = Form(None, alias="FilePath"),
    upload: Optional[UploadFile] = File(None, alias="File"),
    store: StudentStore = Depends(get_student_store),
    images: ImageStore = Depends(get_image_store),
):
    """Insert or fully replace a record, storing an attached image first."""
    try:
        record = StudentRecord(student_id=student_id, name=name, image_path=file_path)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "validation_error",
                "message": "Invalid student record",
                "detail": {"errors": exc.errors(include_context=False)},
            },
        ) from exc

    if upload is not None and upload.filename:
        # The previous image is only removed once the replacement has content.
        data = await upload.read()
        if not data:
            raise _bad_request("image_save_failed", "Uploaded image could not be stored")

        if record.image_path:
            result = images.delete_by_url(record.image_path)
            if result is not ImageDeleteResult.DELETED:
                logger.warning(
                    "Could not remove previous image",
                    extra={"student_id": student_id, "reason": result.message},
                )
                raise _not_found("image_delete_failed", result.message)

        relative_path = images.save(data, upload.filename)
        if relative_path is None:
            raise _bad_request("image_save_failed", "Uploaded image could not be stored")

        stored_name = PurePosixPath(relative_path).name
        record = record.model_copy(
            update={"image_path": f"{get_base_url(request)}/home/get/{stored_name}"}
        )

    saved, _ = store.upsert(record)
    return saved


@router.delete("/home/deletebyid", response_model=StudentRecord)
async def delete_student_by_id(
    student_id: int = Query(..., alias="studentID"),
    store: StudentStore = Depends(get_student_store),
    images: ImageStore = Depends(get_image_store),
):
    """Remove a record and return it, then clean up its image."""
    try:
        removed = store.delete(student_id)
    except RecordNotFoundError as exc:
        raise _bad_request("not_found", str(exc)) from exc

    if removed.image_path:
        try:
            result = images.delete_by_url(removed.image_path)
        except OSError:
            logger.exception(
                "Failed to remove image of deleted record", extra={"student_id": student_id}
            )
        else:
            if result is not ImageDeleteResult.DELETED:
                logger.warning(
                    "Image of deleted record was not removed",
                    extra={"student_id": student_id, "reason": result.message},
                )
    return removed


@router.get("/home/get/{file_name}")
async def get_image(file_name: str, images: ImageStore = Depends(get_image_store)):
    """Return raw image bytes."""
    try:
        data = images.read(file_name)
    except (FileNotFoundError, ValueError) as exc:
        raise _not_found("image_not_found", f"Image not found: {file_name}") from exc
    return Response(content=data, media_type=IMAGE_MEDIA_TYPE)


__all__ = ["router", "get_base_url"]
