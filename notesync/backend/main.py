"""
FastAPI Application Entry Point.

Note store service: anonymous sign-in, per-user notes, live change stream.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notesync.backend.api import health
from notesync.backend.api.v1 import router as api_v1_router
from notesync.backend.core.config import get_app_config
from notesync.backend.core.database import create_tables, dispose_engine
from notesync.backend.core.exception_handlers import register_exception_handlers
from notesync.backend.core.logging import get_logger, setup_logging
from notesync.backend.core.middleware import RequestContextMiddleware
from notesync.backend.core.security import check_secret_strength
from notesync.backend.events.feed import reset_change_feed

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level)
    check_secret_strength()

    if app_config.database.create_tables_on_startup:
        await create_tables()

    logger.info(
        "Application starting",
        app_name=app_config.application.name,
        env=app_config.application.environment,
    )
    yield
    logger.info("Application shutting down")
    reset_change_feed()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = get_app_config().application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.docs_enabled else None,
        redoc_url="/redoc" if app_settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=app_settings.api_prefix)

    return app


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn notesync.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
