"""Background worker running the enrichment pipeline."""

import asyncio
import contextlib

from video_diary.application.services.generators import (
    SummaryGenerator,
    TagSuggestionGenerator,
    TitleGenerator,
    TranscriptGenerator,
    filter_to_favorites,
)
from video_diary.application.services.processing.queue import EntryProcessingQueue
from video_diary.application.services.search_index import InMemorySearchIndex
from video_diary.commons.telemetry import LogContext, get_logger
from video_diary.domain.exceptions import EntryNotFoundException
from video_diary.domain.models import (
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    VideoEntry,
    merge_tags,
)
from video_diary.infrastructure.storage.base import EntryStoreBase


def _same_tags(left: list[str], right: list[str]) -> bool:
    return [tag.casefold() for tag in left] == [tag.casefold() for tag in right]


class EntryProcessingWorker:
    """Drains the processing queue one entry at a time.

    For each entry the stages run in order: transcript, summary, title,
    tags. A stage that cannot produce anything is skipped. The entry is
    written back once, re-indexed with its transcript and marked
    completed. Entries left in progress by a previous run are requeued on
    start.
    """

    def __init__(
        self,
        queue: EntryProcessingQueue,
        store: EntryStoreBase,
        search_index: InMemorySearchIndex,
        transcripts: TranscriptGenerator,
        summaries: SummaryGenerator,
        titles: TitleGenerator,
        tag_suggestions: TagSuggestionGenerator,
    ) -> None:
        self._queue = queue
        self._store = store
        self._search_index = search_index
        self._transcripts = transcripts
        self._summaries = summaries
        self._titles = titles
        self._tag_suggestions = tag_suggestions
        self._task: asyncio.Task[None] | None = None
        self._logger = get_logger(__name__)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Requeue interrupted entries and start consuming the queue."""
        if self.is_running:
            return
        await self.enqueue_pending()
        self._task = asyncio.create_task(self._run(), name="entry-processing-worker")
        self._logger.info("Entry processing worker started")

    async def stop(self) -> None:
        """Cancel the consumer task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._logger.info("Entry processing worker stopped")

    async def enqueue_pending(self) -> int:
        """Queue every entry still marked in progress, across all segments.

        Returns:
            Number of entries queued.
        """
        queued = 0
        try:
            segments = await self._store.list_segments()
            for segment in segments:
                for entry in await self._store.list_entries(segment=segment):
                    if entry.processing_status != ProcessingStatus.IN_PROGRESS:
                        continue
                    self._queue.enqueue(
                        ProcessingRequest(
                            entry_id=entry.id,
                            user_provided_title=entry.has_user_title,
                            user_segment=segment,
                        )
                    )
                    queued += 1
        except Exception as e:
            self._logger.error(
                "Failed to enqueue pending entries",
                extra={"error": str(e)},
            )

        if queued:
            self._logger.info("Requeued pending entries", extra={"count": queued})
        return queued

    async def _run(self) -> None:
        async for request in self._queue.dequeue():
            await self.process(request)

    async def process(self, request: ProcessingRequest) -> VideoEntry | None:
        """Run the pipeline for one request.

        Provider failures are absorbed by the generators. Any other error
        marks the entry failed. Cancellation propagates and leaves the
        entry in progress.

        Returns:
            The completed entry, or None if it was missing or failed.
        """
        segment = request.user_segment
        with LogContext(entry_id=request.entry_id, segment=segment):
            entry: VideoEntry | None = None
            try:
                entry = await self._store.get(request.entry_id, segment=segment)
                if entry is None:
                    self._logger.warning("Entry no longer exists, skipping")
                    return None

                await self._store.update_processing_status(
                    entry.id, ProcessingStatus.IN_PROGRESS, segment=segment
                )
                entry = await self._enrich(entry, request)
                await self._store.update_processing_status(
                    entry.id, ProcessingStatus.COMPLETED, segment=segment
                )
            except Exception as e:
                self._logger.exception(
                    "Failed to process entry",
                    extra={"error": str(e)},
                )
                if entry is not None:
                    await self._mark_failed(entry.id, segment)
                return None

            self._logger.info("Processed entry")
            return entry.with_status(ProcessingStatus.COMPLETED)

    async def _enrich(self, entry: VideoEntry, request: ProcessingRequest) -> VideoEntry:
        segment = request.user_segment
        preferences = await self._store.get_preferences(segment=segment)

        stored_transcript = await self._store.read_transcript(entry.id, segment=segment)
        stored_transcript = (stored_transcript or "").strip() or None
        transcript = stored_transcript
        if transcript is None:
            generated = await self._transcripts.generate(entry, segment=segment)
            transcript = (generated or "").strip() or None

        description = entry.description
        if description is None and transcript:
            description = await self._summaries.summarize(entry, transcript, preferences)

        title = entry.title
        user_provided_title = request.user_provided_title or entry.has_user_title
        if not user_provided_title and description:
            generated_title = await self._titles.generate_title(
                entry, description, preferences
            )
            if generated_title:
                title = generated_title

        tags = list(entry.tags)
        if description and preferences.favorite_tags:
            suggested = await self._tag_suggestions.suggest_tags(
                description, preferences.favorite_tags, tags
            )
            allowed = filter_to_favorites(suggested, preferences.favorite_tags)
            if allowed:
                tags = merge_tags(tags, allowed)

        changed = (
            transcript != stored_transcript
            or title != entry.title
            or description != entry.description
            or not _same_tags(tags, entry.tags)
        )
        if changed:
            updated = await self._store.update(
                entry.id,
                EntryUpdateRequest(
                    title=title,
                    description=description,
                    tags=tags,
                    transcript=transcript,
                ),
                segment=segment,
            )
            if updated is None:
                raise EntryNotFoundException(entry.id)
            entry = updated

        await self._search_index.index(entry, transcript, segment=segment)
        return entry

    async def _mark_failed(self, entry_id: str, segment: str) -> None:
        try:
            await self._store.update_processing_status(
                entry_id, ProcessingStatus.FAILED, segment=segment
            )
        except Exception as e:
            self._logger.error(
                "Failed to update processing status",
                extra={"error": str(e)},
            )
