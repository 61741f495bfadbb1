"""Unit tests for the entry processing worker."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from video_diary.application.services.generators import DescriptionEmbeddingGenerator
from video_diary.application.services.processing import (
    EntryProcessingQueue,
    EntryProcessingWorker,
)
from video_diary.application.services.search_index import InMemorySearchIndex
from video_diary.commons.settings.models import SemanticSearchSettings, StorageSettings
from video_diary.domain.models import (
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    SearchQuery,
    UserPreferences,
)
from video_diary.infrastructure.storage import FileSystemEntryStore, sidecars

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def store(tmp_path):
    return FileSystemEntryStore(StorageSettings(root_directory=str(tmp_path)))


@pytest.fixture
def search_index(store):
    return InMemorySearchIndex(
        store, DescriptionEmbeddingGenerator(None), SemanticSearchSettings()
    )


@pytest.fixture
def queue():
    return EntryProcessingQueue()


@pytest.fixture
def transcripts():
    generator = MagicMock()
    generator.generate = AsyncMock(return_value="we walked along the beach")
    return generator


@pytest.fixture
def summaries():
    generator = MagicMock()
    generator.summarize = AsyncMock(return_value="A walk on the beach.")
    return generator


@pytest.fixture
def titles():
    generator = MagicMock()
    generator.generate_title = AsyncMock(return_value="Beach Walk")
    return generator


@pytest.fixture
def tag_suggestions():
    generator = MagicMock()
    generator.suggest_tags = AsyncMock(return_value=["outdoors", "Invented"])
    return generator


@pytest.fixture
def worker(queue, store, search_index, transcripts, summaries, titles, tag_suggestions):
    return EntryProcessingWorker(
        queue=queue,
        store=store,
        search_index=search_index,
        transcripts=transcripts,
        summaries=summaries,
        titles=titles,
        tag_suggestions=tag_suggestions,
    )


async def _save(store, segment="default", **metadata):
    return await store.save(
        io.BytesIO(b"video"),
        "clip.webm",
        EntryUpdateRequest(**metadata),
        processing_status=ProcessingStatus.IN_PROGRESS,
        segment=segment,
    )


def _request(entry, segment="default", user_provided_title=False):
    return ProcessingRequest(
        entry_id=entry.id,
        user_provided_title=user_provided_title,
        user_segment=segment,
    )


# =============================================================================
# Pipeline
# =============================================================================


class TestProcess:
    """Tests for a single pipeline run."""

    async def test_full_pipeline(
        self, worker, store, search_index, summaries, titles, tag_suggestions
    ):
        await store.update_preferences(
            UserPreferences(favorite_tags=["Outdoors", "Work"])
        )
        entry = await _save(store)

        result = await worker.process(_request(entry))

        assert result.processing_status == ProcessingStatus.COMPLETED
        assert result.description == "A walk on the beach."
        assert result.title == "Beach Walk"
        assert result.tags == ["Outdoors"]

        stored = await store.get(entry.id)
        assert stored.processing_status == ProcessingStatus.COMPLETED
        assert stored.title == "Beach Walk"
        assert sidecars.read_transcript(stored.video_path) == "we walked along the beach"

        summaries.summarize.assert_awaited_once()
        assert summaries.summarize.call_args.args[1] == "we walked along the beach"
        titles.generate_title.assert_awaited_once()
        tag_suggestions.suggest_tags.assert_awaited_once_with(
            "A walk on the beach.", ["Outdoors", "Work"], []
        )

        hits = await search_index.search(SearchQuery(keyword="along the beach"))
        assert [hit.id for hit in hits] == [entry.id]

    async def test_user_title_kept(self, worker, store, titles):
        entry = await _save(store, title="My Day")

        result = await worker.process(_request(entry, user_provided_title=True))

        assert result.title == "My Day"
        titles.generate_title.assert_not_awaited()

    async def test_default_title_replaced(self, worker, store, titles):
        entry = await _save(store)
        result = await worker.process(_request(entry))
        assert result.title == "Beach Walk"

    async def test_existing_description_not_summarized(
        self, worker, store, summaries, titles
    ):
        entry = await _save(store, description="My own words")

        result = await worker.process(_request(entry))

        summaries.summarize.assert_not_awaited()
        assert result.description == "My own words"
        assert titles.generate_title.call_args.args[1] == "My own words"

    async def test_stored_transcript_reused(self, worker, store, transcripts, summaries):
        entry = await _save(store, transcript="already transcribed")

        await worker.process(_request(entry))

        transcripts.generate.assert_not_awaited()
        assert summaries.summarize.call_args.args[1] == "already transcribed"

    async def test_no_transcript_skips_summary(
        self, worker, store, transcripts, summaries, titles
    ):
        transcripts.generate.return_value = None
        entry = await _save(store)

        result = await worker.process(_request(entry))

        summaries.summarize.assert_not_awaited()
        titles.generate_title.assert_not_awaited()
        assert result.processing_status == ProcessingStatus.COMPLETED
        assert result.title == "Untitled"

    async def test_no_favorites_skips_tags(self, worker, store, tag_suggestions):
        entry = await _save(store)
        await worker.process(_request(entry))
        tag_suggestions.suggest_tags.assert_not_awaited()

    async def test_tags_merged_with_existing(self, worker, store):
        await store.update_preferences(UserPreferences(favorite_tags=["Outdoors"]))
        entry = await _save(store, tags=["outdoors", "Family"])

        result = await worker.process(_request(entry))

        assert result.tags == ["outdoors", "Family"]

    async def test_segment_respected(self, worker, store):
        entry = await _save(store, segment="alice")

        result = await worker.process(_request(entry, segment="alice"))

        assert result is not None
        assert (await store.get(entry.id, segment="alice")).title == "Beach Walk"

    async def test_missing_entry(self, worker, store):
        request = ProcessingRequest(entry_id="missing", user_segment="default")
        assert await worker.process(request) is None

    async def test_failure_marks_failed(self, worker, store, summaries):
        summaries.summarize.side_effect = RuntimeError("unexpected")
        entry = await _save(store)

        assert await worker.process(_request(entry)) is None

        stored = await store.get(entry.id)
        assert stored.processing_status == ProcessingStatus.FAILED


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    """Tests for recovery and the consumer task."""

    async def test_enqueue_pending(self, worker, store, queue):
        await _save(store, segment="alice")
        done = await store.save(io.BytesIO(b"v"), "a.webm", EntryUpdateRequest())
        assert done.processing_status == ProcessingStatus.NONE

        queued = await worker.enqueue_pending()

        assert queued == 1
        assert len(queue) == 1

    async def test_enqueue_pending_keeps_user_title(self, worker, store, queue):
        await _save(store, title="Named")
        await worker.enqueue_pending()

        request = await anext(queue.dequeue())
        assert request.user_provided_title is True
        assert request.user_segment == "default"

    async def test_start_processes_queue(self, worker, store, queue):
        entry = await _save(store)

        await worker.start()
        assert worker.is_running
        await queue.join()
        await worker.stop()

        assert worker.is_running is False
        stored = await store.get(entry.id)
        assert stored.processing_status == ProcessingStatus.COMPLETED

    async def test_stop_without_start(self, worker):
        await worker.stop()
        assert worker.is_running is False
