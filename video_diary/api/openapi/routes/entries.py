"""Diary entry endpoints."""

from datetime import datetime
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from video_diary.api.dependencies import EntryServiceDep, SegmentDep
from video_diary.domain.models import EntryUpdateRequest, ProcessingStatus, VideoEntry
from video_diary.infrastructure.storage.base import DeleteMode

router = APIRouter()


class EntryResponse(BaseModel):
    """A diary entry as returned to clients."""

    id: str = Field(description="Entry UUID")
    title: str = Field(description="Display title")
    description: str | None = Field(default=None, description="Description or summary")
    tags: list[str] = Field(default_factory=list, description="Entry tags")
    file_name: str = Field(description="Media file name on disk")
    created_at: datetime = Field(description="Recording time (UTC)")
    completed_at: datetime | None = Field(
        default=None,
        description="Last time the metadata was finalized",
    )
    processing_status: ProcessingStatus = Field(description="Enrichment status")
    has_embedding: bool = Field(
        default=False,
        description="Whether the entry takes part in semantic search",
    )

    @classmethod
    def from_entry(cls, entry: VideoEntry) -> "EntryResponse":
        return cls(
            id=entry.id,
            title=entry.title,
            description=entry.description,
            tags=entry.tags,
            file_name=Path(entry.video_path).name,
            created_at=entry.created_at,
            completed_at=entry.completed_at,
            processing_status=entry.processing_status,
            has_embedding=bool(entry.description_embedding),
        )


class EntryUpdateBody(BaseModel):
    """Metadata replacing an entry's title, description and tags."""

    title: str | None = Field(default=None, description="New title")
    description: str | None = Field(default=None, description="New description")
    tags: list[str] = Field(default_factory=list, description="New tag set")
    transcript: str | None = Field(
        default=None,
        description="Transcript to store; omitted keeps the current one",
    )

    def to_request(self) -> EntryUpdateRequest:
        return EntryUpdateRequest(**self.model_dump())


class TranscriptResponse(BaseModel):
    """Transcript of an entry."""

    entry_id: str = Field(description="Entry UUID")
    transcript: str | None = Field(default=None, description="Transcript text")


def split_tags(raw: list[str] | None) -> list[str]:
    """Accept tags as repeated form fields or comma separated values."""
    tags: list[str] = []
    for value in raw or []:
        tags.extend(part for part in value.split(",") if part.strip())
    return tags


@router.get(
    "/entries",
    response_model=list[EntryResponse],
    summary="List entries",
    description="List the caller's diary entries, newest first.",
)
async def list_entries(
    service: EntryServiceDep,
    segment: SegmentDep,
) -> list[EntryResponse]:
    """List entries for the current user."""
    entries = await service.list_entries(segment=segment)
    return [EntryResponse.from_entry(entry) for entry in entries]


@router.post(
    "/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create entry",
    description="Upload a recording in one request and queue it for enrichment.",
)
async def create_entry(
    service: EntryServiceDep,
    segment: SegmentDep,
    file: Annotated[UploadFile, File(description="Recorded media")],
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    tags: Annotated[list[str] | None, Form()] = None,
    transcript: Annotated[str | None, Form()] = None,
    process: Annotated[bool, Form(description="Run the enrichment pipeline")] = True,
) -> EntryResponse:
    """Create an entry from a single multipart upload."""
    request = EntryUpdateRequest(
        title=title,
        description=description,
        tags=split_tags(tags),
        transcript=transcript,
    )
    entry = await service.create_entry(
        file.file,
        file.filename,
        request,
        process=process,
        segment=segment,
    )
    return EntryResponse.from_entry(entry)


@router.get(
    "/entries/{entry_id}",
    response_model=EntryResponse,
    summary="Get entry",
)
async def get_entry(
    entry_id: str,
    service: EntryServiceDep,
    segment: SegmentDep,
) -> EntryResponse:
    """Get a single entry."""
    return EntryResponse.from_entry(await service.get_entry(entry_id, segment=segment))


@router.put(
    "/entries/{entry_id}",
    response_model=EntryResponse,
    summary="Update entry",
    description="Replace title, description and tags. A new title renames the media.",
)
async def update_entry(
    entry_id: str,
    body: EntryUpdateBody,
    service: EntryServiceDep,
    segment: SegmentDep,
) -> EntryResponse:
    """Update an entry's metadata."""
    entry = await service.update_entry(entry_id, body.to_request(), segment=segment)
    return EntryResponse.from_entry(entry)


@router.delete(
    "/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete entry",
    description="Deep delete removes the files; soft delete leaves a .DELETED marker.",
)
async def delete_entry(
    entry_id: str,
    service: EntryServiceDep,
    segment: SegmentDep,
    mode: Annotated[DeleteMode, Query(description="deep or soft")] = DeleteMode.DEEP,
) -> Response:
    """Delete an entry."""
    await service.delete_entry(entry_id, mode, segment=segment)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/entries/{entry_id}/reprocess",
    response_model=EntryResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Reprocess entry",
    description="Queue an entry for another enrichment pass.",
)
async def reprocess_entry(
    entry_id: str,
    service: EntryServiceDep,
    segment: SegmentDep,
) -> EntryResponse:
    """Queue an entry for reprocessing."""
    return EntryResponse.from_entry(
        await service.reprocess_entry(entry_id, segment=segment)
    )


@router.get(
    "/entries/{entry_id}/transcript",
    response_model=TranscriptResponse,
    summary="Get transcript",
)
async def get_transcript(
    entry_id: str,
    service: EntryServiceDep,
    segment: SegmentDep,
) -> TranscriptResponse:
    """Get an entry's transcript."""
    transcript = await service.get_transcript(entry_id, segment=segment)
    return TranscriptResponse(entry_id=entry_id, transcript=transcript)
