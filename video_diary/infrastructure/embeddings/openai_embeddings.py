"""OpenAI implementation of text embedding service."""

from typing import Any, ClassVar

from openai import AsyncOpenAI

from video_diary.commons.telemetry import timed
from video_diary.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)


class OpenAIEmbeddingService(EmbeddingServiceBase):
    """OpenAI implementation of text embedding service.

    Uses OpenAI's text-embedding models (e.g., text-embedding-3-small/large).
    """

    # Native model dimensions
    _MODEL_DIMENSIONS: ClassVar[dict[str, int]] = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        """Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key.
            model: Embedding model to use.
            base_url: Optional custom API endpoint (for Azure, etc.).
            dimensions: Optional shortened output size (text-embedding-3 only).
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
        )
        self._model = model
        native = self._MODEL_DIMENSIONS.get(model)
        # Only request shortening when it differs from the native size
        self._requested_dimensions = (
            dimensions if dimensions and native and dimensions < native else None
        )
        self._dimensions = self._requested_dimensions or native or dimensions or 1536

    @timed
    async def embed_text(
        self,
        text: str,
        model: str | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text."""
        use_model = model or self._model
        kwargs: dict[str, Any] = {"model": use_model, "input": text}
        if self._requested_dimensions:
            kwargs["dimensions"] = self._requested_dimensions

        response = await self._client.embeddings.create(**kwargs)

        embedding = response.data[0].embedding
        return EmbeddingResult(
            vector=embedding,
            dimensions=len(embedding),
            model=use_model,
            tokens_used=response.usage.total_tokens if response.usage else None,
        )

    @property
    def text_dimensions(self) -> int:
        return self._dimensions
