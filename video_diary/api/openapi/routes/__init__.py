"""API route handlers."""

from video_diary.api.openapi.routes import entries, health, search, settings, uploads

__all__ = [
    "entries",
    "health",
    "search",
    "settings",
    "uploads",
]
