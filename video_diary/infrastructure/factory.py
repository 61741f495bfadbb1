"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from video_diary.commons.settings.models import Settings
from video_diary.commons.telemetry import get_logger
from video_diary.infrastructure.embeddings import (
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from video_diary.infrastructure.llm import (
    AnthropicLLMService,
    LLMServiceBase,
    OpenAILLMService,
)
from video_diary.infrastructure.storage import (
    ChunkedUploadStore,
    DescriptionEmbedder,
    FileSystemEntryStore,
)
from video_diary.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionServiceBase,
)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings.
    Optional providers (LLM, transcription, embeddings) return None when
    their feature is disabled or lacks credentials.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_entry_store(
        self,
        embed_description: DescriptionEmbedder | None = None,
    ) -> FileSystemEntryStore:
        """Get entry store instance.

        Args:
            embed_description: Embedding producer used on the first call.

        Returns:
            Filesystem entry store rooted at the configured directory.
        """
        if "entry_store" not in self._instances:
            self._instances["entry_store"] = FileSystemEntryStore(
                self._settings.storage,
                embed_description=embed_description,
            )
        return cast("FileSystemEntryStore", self._instances["entry_store"])

    def get_upload_store(self) -> ChunkedUploadStore:
        """Get chunked upload store instance."""
        if "upload_store" not in self._instances:
            self._instances["upload_store"] = ChunkedUploadStore(
                self._settings.storage
            )
        return cast("ChunkedUploadStore", self._instances["upload_store"])

    def get_transcription_service(self) -> TranscriptionServiceBase | None:
        """Get transcription service instance.

        Returns:
            Configured transcription service, or None when disabled.
        """
        trans_settings = self._settings.transcription
        if not trans_settings.is_active:
            return None
        if "transcription" not in self._instances:
            self._instances["transcription"] = OpenAIWhisperTranscription(
                api_key=trans_settings.api_key,
                model=trans_settings.model,
                base_url=trans_settings.base_url,
                timeout_seconds=trans_settings.timeout_seconds,
            )
        return cast("TranscriptionServiceBase", self._instances["transcription"])

    def get_text_embedding_service(self) -> EmbeddingServiceBase | None:
        """Get text embedding service instance.

        Returns:
            Configured embedding service, or None when semantic search is off.
        """
        search_settings = self._settings.semantic_search
        if not search_settings.is_active:
            return None
        if "text_embedding" not in self._instances:
            self._instances["text_embedding"] = OpenAIEmbeddingService(
                api_key=search_settings.api_key,
                model=search_settings.model,
                base_url=search_settings.endpoint,
                dimensions=search_settings.dimensions,
            )
        return cast("EmbeddingServiceBase", self._instances["text_embedding"])

    def get_llm_service(self) -> LLMServiceBase | None:
        """Get LLM service instance.

        Returns:
            Configured LLM service, or None without credentials.

        Raises:
            ValueError: If provider is not supported.
        """
        llm_settings = self._settings.llm
        if not llm_settings.is_configured:
            return None
        if "llm" not in self._instances:
            provider = llm_settings.provider

            if provider == "anthropic":
                self._instances["llm"] = AnthropicLLMService(
                    api_key=llm_settings.api_key,
                    model=llm_settings.model,
                    base_url=llm_settings.endpoint,
                    timeout_seconds=llm_settings.timeout_seconds,
                )
            elif provider == "openai":
                self._instances["llm"] = OpenAILLMService(
                    api_key=llm_settings.api_key,
                    model=llm_settings.model,
                    base_url=llm_settings.endpoint,
                    timeout_seconds=llm_settings.timeout_seconds,
                )
            else:
                raise ValueError(f"Unsupported LLM provider: {provider}")

        return cast("LLMServiceBase", self._instances["llm"])

    async def close_all(self) -> None:
        """Close provider clients that hold connections."""
        for key, instance in self._instances.items():
            client = getattr(instance, "_client", None)
            close = getattr(client, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                self._logger.warning(
                    "Failed to close client",
                    extra={"service": key, "error": str(e)},
                )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
