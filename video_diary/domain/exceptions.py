"""Domain exceptions for the video diary."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from video_diary.domain.models.entry import ProcessingStatus


class DomainException(Exception):
    """Base exception for domain errors."""


class EntryNotFoundException(DomainException):
    """Raised when a requested entry is not in the caller's collection."""

    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")


class UploadSessionNotFoundException(DomainException):
    """Raised for unknown upload sessions.

    A session owned by another user segment is reported the same way, so
    callers cannot discover other users' session ids.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Upload session not found: {session_id}")


class InvalidUploadException(DomainException):
    """Raised when an upload request is malformed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid upload: {reason}")


class EntryNotReprocessableException(DomainException):
    """Raised when reprocessing is requested for an entry already in the pipeline."""

    def __init__(self, entry_id: str, status: ProcessingStatus) -> None:
        self.entry_id = entry_id
        self.status = status
        super().__init__(
            f"Entry {entry_id} cannot be reprocessed. Current status: {status}"
        )


class StorageException(DomainException):
    """Raised when media or the entry index cannot be written or read."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage operation '{operation}' failed: {reason}")
