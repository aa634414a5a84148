"""Rematch Engine — FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .common import init_logging
from .config import settings
from .db import init_db
from .exceptions import RematchError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    init_logging()
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Buyer profiles and AI qualification prompt settings",
        lifespan=lifespan,
    )

    # CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .middleware import RequestLoggingMiddleware
    app.add_middleware(RequestLoggingMiddleware)

    # Every error body is {"error": ...}
    from .api.errors import rematch_error_handler, request_validation_handler
    app.add_exception_handler(RematchError, rematch_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Register routers
    from .api.buyers import router as buyers_router
    from .api.errors import router as errors_router
    from .api.health import router as health_router
    from .api.settings import router as settings_router
    app.include_router(health_router)
    app.include_router(settings_router, prefix="/api")
    app.include_router(buyers_router, prefix="/api")
    app.include_router(errors_router, prefix="/api")

    return app


app = create_app()
