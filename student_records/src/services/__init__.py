"""Service layer for business logic and storage."""

from .auth import AuthError, AuthService
from .config import AppConfig, get_config, reload_config
from .image_store import ImageDeleteResult, ImageStore, sanitize_image_path
from .student_store import (
    InMemoryStudentStore,
    IntegrityError,
    RecordNotFoundError,
    StudentStore,
    StudentStoreError,
)

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "AuthService",
    "AuthError",
    "ImageStore",
    "ImageDeleteResult",
    "sanitize_image_path",
    "StudentStore",
    "InMemoryStudentStore",
    "StudentStoreError",
    "RecordNotFoundError",
    "IntegrityError",
]
