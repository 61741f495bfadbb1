"""Unit tests for the in-memory hybrid search index."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest

from video_diary.application.services.generators import DescriptionEmbeddingGenerator
from video_diary.application.services.search_index import (
    InMemorySearchIndex,
    cosine_similarity,
)
from video_diary.commons.settings.models import SemanticSearchSettings, StorageSettings
from video_diary.domain.models import KEYWORD_SCORE, EntryUpdateRequest, SearchQuery
from video_diary.infrastructure.embeddings.base import EmbeddingResult
from video_diary.infrastructure.storage import FileSystemEntryStore, sidecars

VECTORS = {
    "Walk on the beach": [1.0, 0.0, 0.0],
    "Meeting at the office": [0.0, 1.0, 0.0],
    "sea": [0.9, 0.1, 0.0],
    "nothing alike": [0.0, 0.0, 1.0],
}


def _embed(text, model=None):
    vector = VECTORS[text]
    return EmbeddingResult(vector=vector, dimensions=len(vector), model="test")


@pytest.fixture
def store(tmp_path):
    return FileSystemEntryStore(StorageSettings(root_directory=str(tmp_path)))


@pytest.fixture
def embedding_service():
    service = MagicMock()
    service.embed_text = AsyncMock(side_effect=_embed)
    return service


@pytest.fixture
def semantic_index(store, embedding_service):
    return InMemorySearchIndex(
        store,
        DescriptionEmbeddingGenerator(embedding_service),
        SemanticSearchSettings(enabled=True, api_key="test-key"),
    )


@pytest.fixture
def keyword_index(store):
    return InMemorySearchIndex(
        store, DescriptionEmbeddingGenerator(None), SemanticSearchSettings()
    )


async def _save(store, segment="default", **metadata):
    return await store.save(
        io.BytesIO(b"video"), "clip.webm", EntryUpdateRequest(**metadata), segment=segment
    )


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([], [1.0]) == 0.0

    def test_common_prefix(self):
        assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 5.0]) == pytest.approx(1.0)


# =============================================================================
# Keyword search
# =============================================================================


class TestKeywordSearch:
    """Tests for keyword matching."""

    async def test_matches_fields_case_insensitively(self, store, keyword_index):
        by_title = await _save(store, title="Beach trip")
        by_description = await _save(store, description="A day at the BEACH")
        by_transcript = await _save(store, transcript="we went to the beach")
        await _save(store, title="Office")

        results = await keyword_index.search(SearchQuery(keyword="beach"))

        assert [r.id for r in results] == [
            by_transcript.id,
            by_description.id,
            by_title.id,
        ]
        assert all(r.score == KEYWORD_SCORE for r in results)

    async def test_empty_query(self, store, keyword_index):
        await _save(store, title="Anything")
        assert await keyword_index.search(SearchQuery()) == []
        assert await keyword_index.search(SearchQuery(keyword="   ")) == []

    async def test_vector_query_used_as_keyword(self, store, keyword_index):
        entry = await _save(store, title="Sunset at sea")

        results = await keyword_index.search(SearchQuery(vector_query="sea"))

        assert keyword_index.semantic_enabled is False
        assert [r.id for r in results] == [entry.id]

    async def test_index_attaches_transcript(self, store, keyword_index):
        entry = await _save(store, title="Later")
        await keyword_index.index(entry, "hidden phrase")

        results = await keyword_index.search(SearchQuery(keyword="hidden"))

        assert [r.id for r in results] == [entry.id]

    async def test_segments_isolated(self, store, keyword_index):
        await _save(store, segment="alice", title="Beach")

        assert await keyword_index.search(SearchQuery(keyword="beach")) == []
        alice = await keyword_index.search(
            SearchQuery(keyword="beach"), segment="alice"
        )
        assert len(alice) == 1

    async def test_remove(self, store, keyword_index):
        entry = await _save(store, title="Beach")
        await keyword_index.search(SearchQuery(keyword="beach"))

        assert await keyword_index.remove(entry.id) is True
        assert await keyword_index.remove(entry.id) is False
        assert await keyword_index.search(SearchQuery(keyword="beach")) == []

    async def test_reindex_replaces(self, store, keyword_index):
        entry = await _save(store, title="Beach")
        await keyword_index.index(entry.model_copy(update={"title": "Mountain"}))

        assert await keyword_index.search(SearchQuery(keyword="beach")) == []
        assert len(keyword_index) == 1


# =============================================================================
# Semantic search
# =============================================================================


class TestSemanticSearch:
    """Tests for embedding-based search."""

    async def test_ranks_by_similarity(self, store, semantic_index):
        beach = await _save(store, description="Walk on the beach")
        office = await _save(store, description="Meeting at the office")

        results = await semantic_index.search(SearchQuery(vector_query="sea"))

        assert [r.id for r in results] == [beach.id, office.id]
        assert results[0].score > results[1].score > 0

    async def test_generated_embeddings_written_back(self, store, semantic_index):
        entry = await _save(store, description="Walk on the beach")

        await semantic_index.search(SearchQuery(vector_query="sea"))

        assert sidecars.read_embedding(entry.video_path) == [1.0, 0.0, 0.0]

    async def test_existing_embedding_not_regenerated(
        self, store, semantic_index, embedding_service
    ):
        entry = await _save(store, description="Walk on the beach")
        sidecars.write_embedding(entry.video_path, [1.0, 0.0, 0.0])

        await semantic_index.search(SearchQuery(vector_query="sea"))

        embedded = [c.args[0] for c in embedding_service.embed_text.call_args_list]
        assert embedded == ["sea"]

    async def test_result_limit(self, store, embedding_service):
        index = InMemorySearchIndex(
            store,
            DescriptionEmbeddingGenerator(embedding_service),
            SemanticSearchSettings(enabled=True, api_key="test-key", result_limit=1),
        )
        beach = await _save(store, description="Walk on the beach")
        await _save(store, description="Meeting at the office")

        results = await index.search(SearchQuery(vector_query="sea"))

        assert [r.id for r in results] == [beach.id]

    async def test_falls_back_to_keyword(self, store, semantic_index):
        await _save(store, description="Walk on the beach")
        titled = await _save(store, title="nothing alike here")

        results = await semantic_index.search(SearchQuery(vector_query="nothing alike"))

        assert [r.id for r in results] == [titled.id]
        assert results[0].score == KEYWORD_SCORE

    async def test_keyword_only_skips_embeddings(
        self, store, semantic_index, embedding_service
    ):
        entry = await _save(store, title="Beach")

        results = await semantic_index.search(SearchQuery(keyword="beach"))

        assert [r.id for r in results] == [entry.id]
        embedding_service.embed_text.assert_not_awaited()
