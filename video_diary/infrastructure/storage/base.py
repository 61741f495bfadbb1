"""Abstract base class for entry storage."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from video_diary.domain.models import (
    EntryUpdateRequest,
    ProcessingStatus,
    UserPreferences,
    VideoEntry,
)

# Produces an embedding for a description, or None when unavailable
DescriptionEmbedder = Callable[[str], Awaitable[list[float] | None]]


class DeleteMode(str, Enum):
    """How much of an entry to remove."""

    DEEP = "deep"  # Media file and every sidecar are deleted
    SOFT = "soft"  # Files stay; a .DELETED snapshot marks the media


class EntryStoreBase(ABC):
    """Durable per-user collection of diary entries and preferences.

    Every method takes an optional ``segment``; when omitted the segment of
    the current request is used.
    """

    @abstractmethod
    async def save(
        self,
        media: BinaryIO | Path,
        original_file_name: str,
        metadata: EntryUpdateRequest,
        *,
        processing_status: ProcessingStatus = ProcessingStatus.NONE,
        segment: str | None = None,
    ) -> VideoEntry:
        """Persist new media and its metadata.

        Args:
            media: Readable binary stream, or a file to move into place.
            original_file_name: Client file name; supplies the extension.
            metadata: Normalized title, description, tags and transcript.
            processing_status: Initial pipeline status.
            segment: Owning user segment.

        Returns:
            The stored entry.

        Raises:
            StorageException: If the media or the index cannot be written.
        """

    @abstractmethod
    async def list_entries(self, *, segment: str | None = None) -> list[VideoEntry]:
        """Return all entries, newest first."""

    @abstractmethod
    async def get(self, entry_id: str, *, segment: str | None = None) -> VideoEntry | None:
        """Return one entry, or None if it does not exist."""

    @abstractmethod
    async def update(
        self,
        entry_id: str,
        request: EntryUpdateRequest,
        *,
        segment: str | None = None,
    ) -> VideoEntry | None:
        """Replace an entry's metadata.

        Returns:
            The updated entry, or None if it does not exist.
        """

    @abstractmethod
    async def delete(
        self,
        entry_id: str,
        mode: DeleteMode = DeleteMode.DEEP,
        *,
        segment: str | None = None,
    ) -> bool:
        """Remove an entry from the index.

        Returns:
            True if the entry existed.
        """

    @abstractmethod
    async def update_processing_status(
        self,
        entry_id: str,
        status: ProcessingStatus,
        *,
        segment: str | None = None,
    ) -> bool:
        """Set the pipeline status. Returns False for unknown entries."""

    @abstractmethod
    async def update_description_embedding(
        self,
        entry_id: str,
        embedding: list[float] | None,
        *,
        segment: str | None = None,
    ) -> bool:
        """Replace the embedding sidecar; None deletes it."""

    @abstractmethod
    async def read_transcript(
        self,
        entry_id: str,
        *,
        segment: str | None = None,
    ) -> str | None:
        """Return the transcript sidecar text, if any."""

    @abstractmethod
    async def get_preferences(self, *, segment: str | None = None) -> UserPreferences:
        """Return the segment's preferences."""

    @abstractmethod
    async def update_preferences(
        self,
        preferences: UserPreferences,
        *,
        segment: str | None = None,
    ) -> UserPreferences:
        """Normalize and persist preferences."""

    @abstractmethod
    async def list_segments(self) -> list[str]:
        """Return every segment that has data on disk."""
