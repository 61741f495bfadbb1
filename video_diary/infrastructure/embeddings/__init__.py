"""Embedding service implementations."""

from video_diary.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)
from video_diary.infrastructure.embeddings.openai_embeddings import (
    OpenAIEmbeddingService,
)

__all__ = [
    "EmbeddingServiceBase",
    "EmbeddingResult",
    "OpenAIEmbeddingService",
]
