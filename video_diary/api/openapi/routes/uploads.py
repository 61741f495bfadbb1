"""Resumable chunked upload endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from video_diary.api.dependencies import (
    EntryServiceDep,
    SegmentDep,
    SettingsDep,
    UploadStoreDep,
)
from video_diary.api.openapi.routes.entries import EntryResponse
from video_diary.domain.exceptions import (
    InvalidUploadException,
    UploadSessionNotFoundException,
)
from video_diary.domain.models import EntryUpdateRequest, UploadSession

router = APIRouter()


class StartUploadRequest(BaseModel):
    """Request to open an upload session."""

    file_name: str | None = Field(default=None, description="Client file name")
    total_bytes: int = Field(default=0, ge=0, description="Declared size, 0 if unknown")


class UploadSessionResponse(BaseModel):
    """State of an upload session."""

    id: str = Field(description="Upload session id")
    file_name: str = Field(description="Sanitized file name")
    total_bytes: int = Field(description="Declared size")
    uploaded_bytes: int = Field(description="Bytes received so far")

    @classmethod
    def from_session(cls, session: UploadSession) -> "UploadSessionResponse":
        return cls(
            id=session.id,
            file_name=session.original_file_name,
            total_bytes=session.total_bytes,
            uploaded_bytes=session.uploaded_bytes,
        )


class CompleteUploadRequest(BaseModel):
    """Metadata for the entry created from a finished upload."""

    title: str | None = Field(default=None, description="Entry title")
    description: str | None = Field(default=None, description="Entry description")
    tags: list[str] = Field(default_factory=list, description="Entry tags")
    transcript: str | None = Field(default=None, description="Known transcript")
    process: bool = Field(default=True, description="Run the enrichment pipeline")

    def to_request(self) -> EntryUpdateRequest:
        return EntryUpdateRequest(**self.model_dump(exclude={"process"}))


@router.post(
    "/uploads",
    response_model=UploadSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start upload",
)
async def start_upload(
    body: StartUploadRequest,
    uploads: UploadStoreDep,
    segment: SegmentDep,
) -> UploadSessionResponse:
    """Open a chunked upload session."""
    session = uploads.start(body.file_name, body.total_bytes, segment=segment)
    return UploadSessionResponse.from_session(session)


@router.put(
    "/uploads/{upload_id}/chunks",
    response_model=UploadSessionResponse,
    summary="Upload chunk",
    description=(
        "Write the raw request body at `offset`. Omit the offset to append. "
        "Offsets past the received length are clamped to it."
    ),
)
async def upload_chunk(
    upload_id: str,
    request: Request,
    uploads: UploadStoreDep,
    settings: SettingsDep,
    segment: SegmentDep,
    offset: Annotated[int, Query(description="Byte offset, -1 to append")] = -1,
    total_bytes: Annotated[int, Query(ge=0, description="Declared total size")] = 0,
) -> UploadSessionResponse:
    """Append or overwrite a chunk of an upload."""
    if uploads.get(upload_id, segment=segment) is None:
        raise UploadSessionNotFoundException(upload_id)

    chunk = await request.body()
    limit = settings.server.max_upload_chunk_mb * 1024 * 1024
    if len(chunk) > limit:
        raise InvalidUploadException(f"chunk of {len(chunk)} bytes exceeds {limit}")

    length = await uploads.append_chunk(
        upload_id, chunk, offset, total_bytes, segment=segment
    )
    session = uploads.get(upload_id, segment=segment)
    if length is None or session is None:
        raise UploadSessionNotFoundException(upload_id)
    return UploadSessionResponse.from_session(session)


@router.post(
    "/uploads/{upload_id}/complete",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete upload",
    description="Close the session and create a diary entry from the uploaded file.",
)
async def complete_upload(
    upload_id: str,
    body: CompleteUploadRequest,
    service: EntryServiceDep,
    segment: SegmentDep,
) -> EntryResponse:
    """Turn a finished upload into an entry."""
    entry = await service.complete_upload(
        upload_id,
        body.to_request(),
        process=body.process,
        segment=segment,
    )
    return EntryResponse.from_entry(entry)


@router.delete(
    "/uploads/{upload_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel upload",
)
async def cancel_upload(
    upload_id: str,
    uploads: UploadStoreDep,
    segment: SegmentDep,
) -> Response:
    """Cancel an upload and delete its temp file."""
    if not await uploads.cancel(upload_id, segment=segment):
        raise UploadSessionNotFoundException(upload_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
