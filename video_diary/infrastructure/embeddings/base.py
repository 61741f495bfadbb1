"""Abstract base class for embedding services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmbeddingResult:
    """Result from embedding generation."""

    vector: list[float]
    dimensions: int
    model: str
    tokens_used: int | None = None


class EmbeddingServiceBase(ABC):
    """Abstract base class for text embedding providers.

    Implementations:
    - OpenAI (and Azure OpenAI / compatible endpoints via ``base_url``)
    """

    @abstractmethod
    async def embed_text(
        self,
        text: str,
        model: str | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.
            model: Optional model override.

        Returns:
            Embedding result with vector and metadata.
        """

    @property
    @abstractmethod
    def text_dimensions(self) -> int:
        """Dimensions of text embedding vectors."""
