"""In-memory hybrid search over diary entries."""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from video_diary.application.services.generators.embedding import (
    DescriptionEmbeddingGenerator,
)
from video_diary.commons.locks import KeyedLock
from video_diary.commons.settings.models import SemanticSearchSettings
from video_diary.commons.telemetry import get_logger
from video_diary.domain.exceptions import StorageException
from video_diary.domain.models import KEYWORD_SCORE, SearchQuery, SearchResult, VideoEntry
from video_diary.domain.value_objects import resolve_segment
from video_diary.infrastructure.storage import sidecars
from video_diary.infrastructure.storage.base import EntryStoreBase


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity over the common prefix of two vectors.

    Returns 0.0 when either prefix has zero magnitude.
    """
    length = min(len(a), len(b))
    if length == 0:
        return 0.0
    x = np.asarray(a, dtype=np.float64)[:length]
    y = np.asarray(b, dtype=np.float64)[:length]
    denominator = float(np.linalg.norm(x) * np.linalg.norm(y))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(x, y) / denominator)


@dataclass
class IndexedEntry:
    """An entry as held by the index, with its volatile transcript."""

    entry: VideoEntry
    transcript: str | None = None

    @property
    def embedding(self) -> list[float] | None:
        return self.entry.description_embedding

    def matches(self, keyword: str) -> bool:
        needle = keyword.casefold()
        return any(
            field and needle in field.casefold()
            for field in (self.entry.title, self.entry.description, self.transcript)
        )

    def to_result(self, score: float) -> SearchResult:
        return SearchResult(
            id=self.entry.id,
            title=self.entry.title,
            description=self.entry.description,
            score=score,
            created_at=self.entry.created_at,
        )


class InMemorySearchIndex:
    """Keyword and semantic search partitioned by user segment.

    Each segment is filled from the entry store on its first use. Semantic
    search compares the query embedding with every description embedding;
    when it finds nothing, keyword matching over title, description and
    transcript takes over.
    """

    def __init__(
        self,
        store: EntryStoreBase,
        embedder: DescriptionEmbeddingGenerator,
        settings: SemanticSearchSettings,
    ) -> None:
        """Initialize the index.

        Args:
            store: Entry store used for hydration and embedding write-back.
            embedder: Produces description and query embeddings.
            settings: Semantic search configuration.
        """
        self._store = store
        self._embedder = embedder
        self._settings = settings
        self._partitions: dict[str, dict[str, IndexedEntry]] = {}
        self._hydrated: set[str] = set()
        self._hydration_locks = KeyedLock()
        self._logger = get_logger(__name__)

    @property
    def semantic_enabled(self) -> bool:
        return self._settings.enabled and self._embedder.is_available

    @property
    def result_limit(self) -> int:
        return self._settings.result_limit

    async def index(
        self,
        entry: VideoEntry,
        transcript: str | None = None,
        *,
        segment: str | None = None,
    ) -> None:
        """Insert or replace an entry.

        Args:
            entry: Entry to index.
            transcript: Transcript to attach; read from the sidecar when None.
            segment: Segment owning the entry.
        """
        segment = resolve_segment(segment)
        await self._ensure_hydrated(segment)
        await self._upsert(entry, transcript, segment)

    async def remove(self, entry_id: str, *, segment: str | None = None) -> bool:
        """Evict an entry. Returns True if it was indexed."""
        partition = self._partitions.get(resolve_segment(segment), {})
        return partition.pop(entry_id, None) is not None

    async def search(
        self,
        query: SearchQuery,
        *,
        segment: str | None = None,
    ) -> list[SearchResult]:
        """Run a hybrid search.

        Args:
            query: Keyword and/or semantic query.
            segment: Segment to search.

        Returns:
            Semantic matches by descending score, or keyword matches newest
            first when the semantic path is unavailable or finds nothing.
        """
        segment = resolve_segment(segment)
        await self._ensure_hydrated(segment)
        records = list(self._partitions.get(segment, {}).values())

        semantic_text = query.semantic_text
        if semantic_text and self.semantic_enabled:
            results = await self._vector_search(semantic_text, records)
            if results:
                return results
            self._logger.debug(
                "Semantic search found nothing, falling back to keywords",
                extra={"segment": segment},
            )

        keyword = query.keyword_text
        if not keyword:
            return []
        return self._keyword_search(keyword, records)

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._partitions.values())

    async def _vector_search(
        self,
        text: str,
        records: list[IndexedEntry],
    ) -> list[SearchResult]:
        query_vector = await self._embedder.generate(text)
        if not query_vector:
            return []

        scored = []
        for record in records:
            if not record.embedding:
                continue
            score = cosine_similarity(query_vector, record.embedding)
            if score > 0:
                scored.append((score, record))

        scored.sort(
            key=lambda item: (item[0], item[1].entry.created_at),
            reverse=True,
        )
        return [record.to_result(score) for score, record in scored[: self.result_limit]]

    def _keyword_search(
        self,
        keyword: str,
        records: list[IndexedEntry],
    ) -> list[SearchResult]:
        matches = [record for record in records if record.matches(keyword)]
        matches.sort(key=lambda record: record.entry.created_at, reverse=True)
        return [record.to_result(KEYWORD_SCORE) for record in matches]

    async def _ensure_hydrated(self, segment: str) -> None:
        if segment in self._hydrated:
            return
        async with self._hydration_locks(segment):
            if segment in self._hydrated:
                return
            entries = await self._store.list_entries(segment=segment)
            for entry in entries:
                await self._upsert(entry, None, segment)
            self._hydrated.add(segment)
            self._logger.info(
                "Hydrated search index",
                extra={"segment": segment, "entries": len(entries)},
            )

    async def _upsert(
        self,
        entry: VideoEntry,
        transcript: str | None,
        segment: str,
    ) -> None:
        if not transcript or not transcript.strip():
            transcript = sidecars.read_transcript(entry.video_path)

        embedding = entry.description_embedding
        if self.semantic_enabled and not embedding and entry.description:
            embedding = sidecars.read_embedding(entry.video_path)
            if not embedding:
                embedding = await self._embedder.generate(entry.description)
                if embedding:
                    await self._write_back(entry.id, embedding, segment)

        self._partitions.setdefault(segment, {})[entry.id] = IndexedEntry(
            entry=entry.with_embedding(embedding),
            transcript=transcript.strip() if transcript else None,
        )

    async def _write_back(self, entry_id: str, embedding: list[float], segment: str) -> None:
        try:
            await self._store.update_description_embedding(
                entry_id, embedding, segment=segment
            )
        except StorageException as e:
            self._logger.warning(
                "Failed to store generated embedding",
                extra={"entry_id": entry_id, "error": str(e)},
            )
