"""API middleware components."""

from video_diary.api.middleware.error_handler import APIError, error_handler_middleware
from video_diary.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
]
