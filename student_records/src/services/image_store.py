"""Filesystem storage for uploaded student images."""

from __future__ import annotations

import enum
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpeg"


class ImageDeleteResult(enum.Enum):
    """Outcome of a delete-by-URL request."""

    MISSING_URL = "File URL is required"
    NOT_FOUND = "File not found"
    DELETED = "File deleted successfully"

    @property
    def message(self) -> str:
        return self.value


def sanitize_image_path(image_dir: Path, file_name: str) -> Path:
    """
    Resolve a bare file name inside the image directory.

    Raises ValueError if the name is empty or the resolved path leaves the directory.
    """
    if not file_name or file_name in {".", ".."} or "/" in file_name or "\\" in file_name:
        raise ValueError(f"Invalid image name: {file_name!r}")
    root = image_dir.resolve()
    full_path = (root / file_name).resolve()
    if full_path.parent != root:
        raise ValueError(f"Path escapes image directory: {file_name}")
    return full_path


def _extension_for(file_name: Optional[str]) -> str:
    suffix = PurePosixPath(file_name or "").suffix
    return suffix.lower() if suffix else DEFAULT_EXTENSION


class ImageStore:
    """Save, read and delete image files under ``<storage>/images``."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or get_config()
        self.image_dir = self.config.image_dir

    def save(
        self,
        data: Optional[bytes],
        file_name: Optional[str],
        directory: Optional[Path] = None,
    ) -> Optional[str]:
        """
        Write ``data`` under a generated name and return its path relative to storage.

        Returns None when there is nothing to store.
        """
        if not data:
            return None
        target_dir = directory or self.image_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{_extension_for(file_name)}"
        (target_dir / stored_name).write_bytes(data)
        logger.info(
            "Stored image",
            extra={"original_name": file_name, "stored_name": stored_name, "size": len(data)},
        )
        return f"{target_dir.name}/{stored_name}"

    def resolve(self, file_name: str) -> Path:
        return sanitize_image_path(self.image_dir, file_name)

    def read(self, file_name: str) -> bytes:
        """Return the bytes of a stored image."""
        path = self.resolve(file_name)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {file_name}")
        return path.read_bytes()

    def delete_by_url(self, url: Optional[str]) -> ImageDeleteResult:
        """Delete the image a record URL points at; OSErrors propagate."""
        if not url or not url.strip():
            return ImageDeleteResult.MISSING_URL
        file_name = PurePosixPath(unquote(urlparse(url.strip()).path)).name
        try:
            path = self.resolve(file_name)
        except ValueError:
            return ImageDeleteResult.NOT_FOUND
        if not path.is_file():
            return ImageDeleteResult.NOT_FOUND
        path.unlink()
        logger.info("Deleted image", extra={"stored_name": file_name})
        return ImageDeleteResult.DELETED


__all__ = ["ImageStore", "ImageDeleteResult", "sanitize_image_path"]
