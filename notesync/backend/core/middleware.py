"""
Request Context Middleware.

Middleware for request tracking, timing, frontend identification, and context propagation.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notesync.backend.core.logging import get_logger
from notesync.backend.core.utils import utc_now

logger = get_logger(__name__)

# Frontends that talk to the note store. Keep aligned with VALID_SOURCES.
KNOWN_FRONTENDS = {"web", "cli", "tui", "api", "internal"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request context to every request.

    - Generates or propagates request ID (X-Request-ID header)
    - Extracts frontend identifier (X-Frontend-ID header)
    - Records request timing (X-Response-Time header)
    - Binds request context to structlog for automatic inclusion in logs

    Access in endpoints:
        request.state.request_id
        request.state.frontend
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with context tracking."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        frontend = request.headers.get("X-Frontend-ID", "unknown").lower()
        if frontend not in KNOWN_FRONTENDS:
            frontend = "unknown"

        start_time = utc_now()

        request.state.request_id = request_id
        request.state.frontend = frontend

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            source=frontend,
            method=request.method,
            path=request.url.path,
        )

        logger.debug("Request started")

        try:
            response = await call_next(request)

            duration_ms = int((utc_now() - start_time).total_seconds() * 1000)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            logger.debug(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return response

        except Exception as exc:
            duration_ms = int((utc_now() - start_time).total_seconds() * 1000)
            logger.error(
                "Request failed with exception",
                duration_ms=duration_ms,
                error_type=type(exc).__name__,
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()
