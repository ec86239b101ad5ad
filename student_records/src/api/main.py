"""FastAPI application for the student records API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..services.auth import AuthService
from ..services.config import AppConfig, get_config
from ..services.image_store import ImageStore
from ..services.student_store import InMemoryStudentStore, StudentStore
from .middleware import register_error_handlers
from .routes import auth, home

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to log startup and shutdown."""
    config: AppConfig = app.state.config
    logger.info(
        "Records API starting",
        extra={"image_dir": str(config.image_dir), "issuer": config.jwt_issuer},
    )
    yield
    logger.info("Records API stopped; in-memory records discarded")


def create_app(
    config: AppConfig | None = None,
    *,
    student_store: StudentStore | None = None,
    image_store: ImageStore | None = None,
) -> FastAPI:
    """Build the API application with its services attached to ``app.state``."""
    config = config or get_config()

    app = FastAPI(
        title="Student Records API",
        description="JWT-protected CRUD over student records and their images",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.auth_service = AuthService(config=config)
    app.state.student_store = student_store or InMemoryStudentStore()
    app.state.image_store = image_store or ImageStore(config=config)

    register_error_handlers(app)

    app.include_router(auth.router, tags=["auth"])
    app.include_router(home.router, tags=["home"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


__all__ = ["create_app"]
