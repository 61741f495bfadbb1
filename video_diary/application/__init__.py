"""Application layer - use cases and orchestration.

This layer contains:
- Entry service: intake, edits and deletion
- Generators: transcript, summary, title, tag and embedding enrichment
- Processing: the enrichment queue and its background worker
- Search index: hybrid keyword and semantic search
"""

from video_diary.application.services import (
    DescriptionEmbeddingGenerator,
    DiaryEntryService,
    EntryProcessingQueue,
    EntryProcessingWorker,
    InMemorySearchIndex,
    SummaryGenerator,
    TagSuggestionGenerator,
    TitleGenerator,
    TranscriptGenerator,
)

__all__ = [
    "DiaryEntryService",
    "EntryProcessingQueue",
    "EntryProcessingWorker",
    "InMemorySearchIndex",
    "TranscriptGenerator",
    "SummaryGenerator",
    "TitleGenerator",
    "TagSuggestionGenerator",
    "DescriptionEmbeddingGenerator",
]
