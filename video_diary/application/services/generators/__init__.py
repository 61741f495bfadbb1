"""Enrichment generators used by the processing worker."""

from video_diary.application.services.generators.embedding import (
    DescriptionEmbeddingGenerator,
)
from video_diary.application.services.generators.summaries import SummaryGenerator
from video_diary.application.services.generators.tags import (
    TagSuggestionGenerator,
    filter_to_favorites,
)
from video_diary.application.services.generators.titles import TitleGenerator
from video_diary.application.services.generators.transcripts import (
    TranscriptGenerator,
)

__all__ = [
    "TranscriptGenerator",
    "SummaryGenerator",
    "TitleGenerator",
    "TagSuggestionGenerator",
    "DescriptionEmbeddingGenerator",
    "filter_to_favorites",
]
