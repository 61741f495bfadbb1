"""API layer - REST endpoints."""

from video_diary.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
