"""Domain models."""

from video_diary.domain.models.entry import (
    DEFAULT_TITLE,
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    VideoEntry,
    merge_tags,
    normalize_description,
    normalize_tags,
    normalize_title,
)
from video_diary.domain.models.preferences import (
    DEFAULT_TRANSCRIPT_LANGUAGE,
    UserPreferences,
)
from video_diary.domain.models.search import KEYWORD_SCORE, SearchQuery, SearchResult
from video_diary.domain.models.upload import UploadSession

__all__ = [
    # Entry
    "VideoEntry",
    "ProcessingStatus",
    "EntryUpdateRequest",
    "ProcessingRequest",
    "DEFAULT_TITLE",
    "normalize_title",
    "normalize_description",
    "normalize_tags",
    "merge_tags",
    # Preferences
    "UserPreferences",
    "DEFAULT_TRANSCRIPT_LANGUAGE",
    # Upload
    "UploadSession",
    # Search
    "SearchQuery",
    "SearchResult",
    "KEYWORD_SCORE",
]
