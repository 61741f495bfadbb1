"""Request logging middleware."""

import time
import uuid
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from video_diary.commons.settings.models import AuthSettings
from video_diary.commons.telemetry.logger import (
    clear_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)
from video_diary.domain.value_objects import DEFAULT_SEGMENT, set_current_segment

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Adds request ID tracking, resolves the caller's user segment and logs
    request/response details. The user name is only read from the
    configured header when ``auth.trust_user_header`` is set, which is the
    case behind an authenticating reverse proxy.
    """

    def __init__(self, app: ASGIApp, auth: AuthSettings | None = None) -> None:
        super().__init__(app)
        self._auth = auth or AuthSettings()

    def _resolve_segment(self, request: Request) -> str:
        if not self._auth.trust_user_header:
            return set_current_segment(None)
        return set_current_segment(request.headers.get(self._auth.user_header))

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        """Process request with logging.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            HTTP response.
        """
        # Generate request ID
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_correlation_id(request_id)

        # Store in request state for access in routes
        request.state.request_id = request_id
        segment = self._resolve_segment(request)
        request.state.segment = segment
        clear_log_context()
        if segment != DEFAULT_SEGMENT:
            set_log_context(segment=segment)

        # Log request
        start_time = time.perf_counter()
        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        # Process request
        response: Response = await call_next(request)

        # Calculate duration
        duration_ms = (time.perf_counter() - start_time) * 1000

        # Log response
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        # Add request ID to response headers
        response.headers["X-Request-ID"] = request_id

        return response
