"""Filesystem storage for entries, sidecars and uploads."""

from video_diary.infrastructure.storage.base import (
    DeleteMode,
    DescriptionEmbedder,
    EntryStoreBase,
)
from video_diary.infrastructure.storage.entry_store import (
    FileSystemEntryStore,
    segment_root,
)
from video_diary.infrastructure.storage.uploads import ChunkedUploadStore

__all__ = [
    # Entries
    "EntryStoreBase",
    "FileSystemEntryStore",
    "DeleteMode",
    "DescriptionEmbedder",
    "segment_root",
    # Uploads
    "ChunkedUploadStore",
]
