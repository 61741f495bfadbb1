"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from video_diary.commons.telemetry.logger import get_logger
from video_diary.domain.exceptions import (
    DomainException,
    EntryNotFoundException,
    EntryNotReprocessableException,
    InvalidUploadException,
    StorageException,
    UploadSessionNotFoundException,
)

logger = get_logger(__name__)


class APIError(Exception):
    """Base API error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code for clients.
            message: Human-readable error message.
            status_code: HTTP status code.
            details: Additional error details.
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response.

    Args:
        request: HTTP request.
        code: Error code.
        message: Error message.
        status_code: HTTP status code.
        details: Additional details.

    Returns:
        JSON error response.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
            }
        },
    )


def _handle_exception(  # noqa: PLR0911
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle exception and return appropriate error response.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        JSON error response.
    """
    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return _build_error_response(
            request=request,
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
        )

    if isinstance(exc, EntryNotFoundException):
        logger.warning(f"Entry not found: {exc}")
        return _build_error_response(
            request=request,
            code="ENTRY_NOT_FOUND",
            message=str(exc),
            status_code=status.HTTP_404_NOT_FOUND,
            details={"entry_id": exc.entry_id},
        )

    if isinstance(exc, UploadSessionNotFoundException):
        logger.warning(f"Upload session not found: {exc}")
        return _build_error_response(
            request=request,
            code="UPLOAD_NOT_FOUND",
            message=str(exc),
            status_code=status.HTTP_404_NOT_FOUND,
            details={"upload_id": exc.session_id},
        )

    if isinstance(exc, InvalidUploadException):
        logger.warning(f"Invalid upload: {exc}")
        return _build_error_response(
            request=request,
            code="INVALID_UPLOAD",
            message=str(exc),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, EntryNotReprocessableException):
        logger.warning(f"Entry not reprocessable: {exc}")
        return _build_error_response(
            request=request,
            code="ENTRY_IN_PROGRESS",
            message=str(exc),
            status_code=status.HTTP_409_CONFLICT,
            details={"entry_id": exc.entry_id, "status": exc.status.value},
        )

    if isinstance(exc, StorageException):
        logger.error(
            f"Storage failure during {exc.operation}",
            extra={"operation": exc.operation, "reason": exc.reason},
        )
        return _build_error_response(
            request=request,
            code="STORAGE_ERROR",
            message="The diary could not be read or written",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, DomainException):
        logger.warning(f"Domain error: {exc}")
        return _build_error_response(
            request=request,
            code="DOMAIN_ERROR",
            message=str(exc),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
