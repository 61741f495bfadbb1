"""Application services for diary entries, enrichment and search."""

from video_diary.application.services.entries import DiaryEntryService
from video_diary.application.services.generators import (
    DescriptionEmbeddingGenerator,
    SummaryGenerator,
    TagSuggestionGenerator,
    TitleGenerator,
    TranscriptGenerator,
)
from video_diary.application.services.processing import (
    EntryProcessingQueue,
    EntryProcessingWorker,
)
from video_diary.application.services.search_index import (
    InMemorySearchIndex,
    cosine_similarity,
)

__all__ = [
    # Entries
    "DiaryEntryService",
    # Generators
    "TranscriptGenerator",
    "SummaryGenerator",
    "TitleGenerator",
    "TagSuggestionGenerator",
    "DescriptionEmbeddingGenerator",
    # Processing
    "EntryProcessingQueue",
    "EntryProcessingWorker",
    # Search
    "InMemorySearchIndex",
    "cosine_similarity",
]
