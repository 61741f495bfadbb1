"""Chunked upload session model."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class UploadSession(BaseModel):
    """An in-flight resumable upload.

    Sessions only live in memory; a restart forgets them and leaves the
    temporary file behind in the segment's ``uploads`` directory.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Session id")
    user_segment: str = Field(description="Owning user segment")
    temp_file_path: Path = Field(description="Where received bytes are appended")
    original_file_name: str = Field(description="Sanitized client file name")
    total_bytes: int = Field(default=0, ge=0, description="Declared total size")
    uploaded_bytes: int = Field(default=0, ge=0, description="Bytes on disk")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_complete(self) -> bool:
        return self.total_bytes > 0 and self.uploaded_bytes >= self.total_bytes

    def with_progress(self, uploaded_bytes: int, total_bytes: int) -> Self:
        """Return a copy with updated byte accounting."""
        return self.model_copy(
            update={"uploaded_bytes": uploaded_bytes, "total_bytes": total_bytes}
        )
