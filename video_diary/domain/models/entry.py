"""Video diary entry domain model."""

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "Untitled"


class ProcessingStatus(str, Enum):
    """Enrichment pipeline status of an entry."""

    NONE = "none"  # Never queued
    IN_PROGRESS = "in_progress"  # Queued or being processed
    COMPLETED = "completed"  # All enabled stages ran
    FAILED = "failed"  # Pipeline raised; needs a manual retry


def normalize_title(title: str | None) -> str:
    """Trim a title, falling back to the default title when blank."""
    trimmed = (title or "").strip()
    return trimmed or DEFAULT_TITLE


def normalize_description(description: str | None) -> str | None:
    """Trim a description; blank becomes None."""
    trimmed = (description or "").strip()
    return trimmed or None


def normalize_tags(tags: Iterable[str | None] | None) -> list[str]:
    """Trim tags and drop blanks and case-insensitive duplicates.

    Order is preserved and the first spelling of a tag wins:

        >>> normalize_tags([" Trip", "trip", "", "Family"])
        ['Trip', 'Family']
    """
    result: list[str] = []
    seen: set[str] = set()
    for tag in tags or ():
        trimmed = (tag or "").strip()
        key = trimmed.casefold()
        if not trimmed or key in seen:
            continue
        seen.add(key)
        result.append(trimmed)
    return result


def merge_tags(existing: Iterable[str], additions: Iterable[str]) -> list[str]:
    """Append new tags after the existing ones, keeping existing spellings."""
    return normalize_tags([*existing, *additions])


class VideoEntry(BaseModel):
    """A single recorded diary video and its derived metadata.

    The transcript is not part of the entry; it lives in a sidecar next to
    the media file. The description embedding is loaded from its own
    sidecar and is never serialized with the entry.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Entry UUID",
    )
    title: str = Field(default=DEFAULT_TITLE, description="Display title")
    description: str | None = Field(
        default=None,
        description="User supplied or generated summary",
    )
    tags: list[str] = Field(default_factory=list, description="Normalized tags")
    video_path: str = Field(description="Absolute path to the media file")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Recording time (UTC)",
    )
    completed_at: datetime | None = Field(
        default=None,
        description="Last time the metadata was finalized",
    )
    processing_status: ProcessingStatus = Field(
        default=ProcessingStatus.NONE,
        description="Enrichment pipeline status",
    )
    description_embedding: list[float] | None = Field(
        default=None,
        exclude=True,
        description="Embedding of the description, loaded from its sidecar",
    )

    @property
    def has_user_title(self) -> bool:
        """Whether the title was set by someone other than the default."""
        return self.title != DEFAULT_TITLE

    @property
    def is_processing(self) -> bool:
        """Check if the entry is queued or being processed."""
        return self.processing_status == ProcessingStatus.IN_PROGRESS

    def with_status(self, status: ProcessingStatus) -> Self:
        """Return a copy with a new processing status."""
        return self.model_copy(update={"processing_status": status})

    def with_embedding(self, embedding: list[float] | None) -> Self:
        """Return a copy carrying the given description embedding."""
        return self.model_copy(update={"description_embedding": embedding})


class EntryUpdateRequest(BaseModel):
    """Metadata supplied by a user, or produced by the pipeline, for an entry."""

    title: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    transcript: str | None = Field(
        default=None,
        description="Transcript text to persist in the transcript sidecar",
    )

    def normalized(self) -> Self:
        """Return the request with title, description and tags normalized."""
        transcript = self.transcript.strip() if self.transcript else None
        return self.model_copy(
            update={
                "title": normalize_title(self.title),
                "description": normalize_description(self.description),
                "tags": normalize_tags(self.tags),
                "transcript": transcript or None,
            }
        )


class ProcessingRequest(BaseModel):
    """Work item for the enrichment worker."""

    entry_id: str
    user_provided_title: bool = False
    user_segment: str = Field(description="Segment whose store holds the entry")

    model_config = ConfigDict(frozen=True)
