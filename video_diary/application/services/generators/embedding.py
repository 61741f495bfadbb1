"""Description embeddings for semantic search."""

from video_diary.commons.telemetry import get_logger
from video_diary.infrastructure.embeddings.base import EmbeddingServiceBase


class DescriptionEmbeddingGenerator:
    """Embeds entry descriptions and search queries.

    The instance is callable so it can be handed to the entry store as its
    description embedder.
    """

    def __init__(self, embedding_service: EmbeddingServiceBase | None) -> None:
        self._embeddings = embedding_service
        self._logger = get_logger(__name__)

    @property
    def is_available(self) -> bool:
        return self._embeddings is not None

    async def generate(self, text: str | None) -> list[float] | None:
        """Embed text.

        Returns:
            The vector, or None for blank text, a missing provider or a
            provider failure.
        """
        if self._embeddings is None:
            return None
        text = (text or "").strip()
        if not text:
            return None

        try:
            result = await self._embeddings.embed_text(text)
        except Exception as e:
            self._logger.error(
                "Failed to generate embedding",
                extra={"error": str(e), "text_length": len(text)},
            )
            return None

        return list(result.vector) or None

    async def __call__(self, text: str) -> list[float] | None:
        return await self.generate(text)
