"""Entry intake and lifecycle orchestration."""

from pathlib import Path
from typing import BinaryIO

from video_diary.application.services.processing import EntryProcessingQueue
from video_diary.application.services.search_index import InMemorySearchIndex
from video_diary.commons.telemetry import get_logger
from video_diary.domain.exceptions import (
    EntryNotFoundException,
    EntryNotReprocessableException,
    InvalidUploadException,
    UploadSessionNotFoundException,
)
from video_diary.domain.models import (
    DEFAULT_TITLE,
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    UploadSession,
    VideoEntry,
)
from video_diary.domain.value_objects import resolve_segment
from video_diary.infrastructure.storage.base import DeleteMode, EntryStoreBase
from video_diary.infrastructure.storage.uploads import (
    ChunkedUploadStore,
    discard_temp_file,
)


class DiaryEntryService:
    """Creates, edits and removes diary entries.

    Keeps the entry store, the search index and the processing queue in
    step: every new or edited entry is indexed, and entries that need
    enrichment are queued.
    """

    def __init__(
        self,
        store: EntryStoreBase,
        uploads: ChunkedUploadStore,
        search_index: InMemorySearchIndex,
        queue: EntryProcessingQueue,
    ) -> None:
        """Initialize the service.

        Args:
            store: Durable entry store.
            uploads: Chunked upload sessions.
            search_index: Index updated on every change.
            queue: Enrichment queue.
        """
        self._store = store
        self._uploads = uploads
        self._search_index = search_index
        self._queue = queue
        self._logger = get_logger(__name__)

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_entries(self, *, segment: str | None = None) -> list[VideoEntry]:
        return await self._store.list_entries(segment=segment)

    async def get_entry(self, entry_id: str, *, segment: str | None = None) -> VideoEntry:
        """Return an entry.

        Raises:
            EntryNotFoundException: If the entry does not exist.
        """
        entry = await self._store.get(entry_id, segment=segment)
        if entry is None:
            raise EntryNotFoundException(entry_id)
        return entry

    async def get_transcript(self, entry_id: str, *, segment: str | None = None) -> str | None:
        """Return the transcript of an existing entry, if one was produced."""
        await self.get_entry(entry_id, segment=segment)
        return await self._store.read_transcript(entry_id, segment=segment)

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_entry(
        self,
        media: BinaryIO | Path,
        file_name: str | None,
        request: EntryUpdateRequest,
        *,
        process: bool = True,
        segment: str | None = None,
    ) -> VideoEntry:
        """Store a new recording and schedule its enrichment.

        Args:
            media: Binary stream, or a file to move into the store.
            file_name: Client file name; supplies the extension.
            request: User supplied metadata.
            process: Whether to queue the entry for enrichment.
            segment: Owning segment.

        Returns:
            The stored entry.
        """
        segment = resolve_segment(segment)
        request = request.normalized()
        user_provided_title = request.title != DEFAULT_TITLE

        entry = await self._store.save(
            media,
            file_name or "",
            request,
            processing_status=(
                ProcessingStatus.IN_PROGRESS if process else ProcessingStatus.NONE
            ),
            segment=segment,
        )
        await self._search_index.index(entry, request.transcript, segment=segment)

        if process:
            self._queue.enqueue(
                ProcessingRequest(
                    entry_id=entry.id,
                    user_provided_title=user_provided_title,
                    user_segment=segment,
                )
            )

        self._logger.info(
            "Created entry",
            extra={"entry_id": entry.id, "segment": segment, "queued": process},
        )
        return entry

    async def create_from_upload(
        self,
        session: UploadSession,
        request: EntryUpdateRequest,
        *,
        process: bool = True,
    ) -> VideoEntry:
        """Turn a completed upload into an entry.

        The temp file is moved into the store; whatever is left of it is
        removed afterwards, whether or not the save succeeded.

        Raises:
            InvalidUploadException: If nothing was uploaded.
        """
        try:
            if session.uploaded_bytes <= 0:
                raise InvalidUploadException("upload is empty")
            return await self.create_entry(
                session.temp_file_path,
                session.original_file_name,
                request,
                process=process,
                segment=session.user_segment,
            )
        finally:
            discard_temp_file(session.temp_file_path)

    async def complete_upload(
        self,
        session_id: str,
        request: EntryUpdateRequest,
        *,
        process: bool = True,
        segment: str | None = None,
    ) -> VideoEntry:
        """Close an upload session and create its entry.

        Raises:
            UploadSessionNotFoundException: For unknown or foreign sessions.
        """
        session = await self._uploads.complete(session_id, segment=segment)
        if session is None:
            raise UploadSessionNotFoundException(session_id)
        return await self.create_from_upload(session, request, process=process)

    # =========================================================================
    # Mutation
    # =========================================================================

    async def update_entry(
        self,
        entry_id: str,
        request: EntryUpdateRequest,
        *,
        segment: str | None = None,
    ) -> VideoEntry:
        """Replace an entry's metadata and re-index it.

        Raises:
            EntryNotFoundException: If the entry does not exist.
        """
        segment = resolve_segment(segment)
        entry = await self._store.update(entry_id, request, segment=segment)
        if entry is None:
            raise EntryNotFoundException(entry_id)
        await self._search_index.index(entry, request.transcript, segment=segment)
        return entry

    async def delete_entry(
        self,
        entry_id: str,
        mode: DeleteMode = DeleteMode.DEEP,
        *,
        segment: str | None = None,
    ) -> None:
        """Delete an entry and evict it from the index.

        Raises:
            EntryNotFoundException: If the entry does not exist.
        """
        segment = resolve_segment(segment)
        if not await self._store.delete(entry_id, mode, segment=segment):
            raise EntryNotFoundException(entry_id)
        await self._search_index.remove(entry_id, segment=segment)

    async def reprocess_entry(
        self,
        entry_id: str,
        *,
        segment: str | None = None,
    ) -> VideoEntry:
        """Queue an entry for another enrichment pass.

        Raises:
            EntryNotFoundException: If the entry does not exist.
            EntryNotReprocessableException: If it is already in progress.
        """
        segment = resolve_segment(segment)
        entry = await self.get_entry(entry_id, segment=segment)
        if entry.is_processing:
            raise EntryNotReprocessableException(entry_id, entry.processing_status)

        await self._store.update_processing_status(
            entry_id, ProcessingStatus.IN_PROGRESS, segment=segment
        )
        self._queue.enqueue(
            ProcessingRequest(
                entry_id=entry_id,
                user_provided_title=entry.has_user_title,
                user_segment=segment,
            )
        )
        self._logger.info(
            "Queued entry for reprocessing",
            extra={"entry_id": entry_id, "previous_status": entry.processing_status.value},
        )
        return entry.with_status(ProcessingStatus.IN_PROGRESS)
