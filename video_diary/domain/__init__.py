"""Domain layer - business models and logic."""

from video_diary.domain.exceptions import (
    DomainException,
    EntryNotFoundException,
    EntryNotReprocessableException,
    InvalidUploadException,
    StorageException,
    UploadSessionNotFoundException,
)
from video_diary.domain.models import (
    DEFAULT_TITLE,
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    SearchQuery,
    SearchResult,
    UploadSession,
    UserPreferences,
    VideoEntry,
)
from video_diary.domain.value_objects import DEFAULT_SEGMENT, sanitize_segment

__all__ = [
    # Exceptions
    "DomainException",
    "EntryNotFoundException",
    "EntryNotReprocessableException",
    "UploadSessionNotFoundException",
    "InvalidUploadException",
    "StorageException",
    # Entries
    "VideoEntry",
    "ProcessingStatus",
    "EntryUpdateRequest",
    "ProcessingRequest",
    "DEFAULT_TITLE",
    # Preferences, uploads, search
    "UserPreferences",
    "UploadSession",
    "SearchQuery",
    "SearchResult",
    # Value Objects
    "DEFAULT_SEGMENT",
    "sanitize_segment",
]
