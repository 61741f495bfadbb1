"""Unit tests for infrastructure factory."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from video_diary.commons.settings.models import (
    LLMSettings,
    SemanticSearchSettings,
    Settings,
    StorageSettings,
    TranscriptionSettings,
)
from video_diary.infrastructure.embeddings import OpenAIEmbeddingService
from video_diary.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from video_diary.infrastructure.llm import AnthropicLLMService, OpenAILLMService
from video_diary.infrastructure.storage import ChunkedUploadStore, FileSystemEntryStore
from video_diary.infrastructure.transcription import OpenAIWhisperTranscription


@pytest.fixture(autouse=True)
def reset_factory_before_each():
    """Reset factory singleton before each test."""
    reset_factory()
    yield
    reset_factory()


@pytest.fixture
def settings(tmp_path):
    """Settings with every optional provider configured."""
    return Settings(
        storage=StorageSettings(root_directory=str(tmp_path)),
        transcription=TranscriptionSettings(enabled=True, api_key="test-key"),
        llm=LLMSettings(provider="openai", api_key="test-key"),
        semantic_search=SemanticSearchSettings(enabled=True, api_key="test-key"),
    )


class TestInfrastructureFactory:
    """Tests for InfrastructureFactory."""

    def test_factory_init(self, settings):
        """Test factory initialization."""
        factory = InfrastructureFactory(settings)
        assert factory.settings is settings
        assert factory._instances == {}

    def test_get_entry_store(self, settings, tmp_path):
        """Test getting entry store."""
        factory = InfrastructureFactory(settings)
        store = factory.get_entry_store()

        assert isinstance(store, FileSystemEntryStore)
        assert store.root_directory == tmp_path.resolve()

    def test_get_upload_store(self, settings):
        """Test getting upload store."""
        factory = InfrastructureFactory(settings)
        assert isinstance(factory.get_upload_store(), ChunkedUploadStore)

    def test_get_transcription_service(self, settings):
        """Test getting transcription service."""
        factory = InfrastructureFactory(settings)
        assert isinstance(
            factory.get_transcription_service(), OpenAIWhisperTranscription
        )

    def test_transcription_disabled(self, tmp_path):
        """Test transcription returns None when disabled."""
        factory = InfrastructureFactory(
            Settings(storage=StorageSettings(root_directory=str(tmp_path)))
        )
        assert factory.get_transcription_service() is None

    def test_get_text_embedding_service(self, settings):
        """Test getting text embedding service."""
        factory = InfrastructureFactory(settings)
        service = factory.get_text_embedding_service()

        assert isinstance(service, OpenAIEmbeddingService)
        assert service.text_dimensions == 1536

    def test_embedding_disabled(self, tmp_path):
        """Test embedding service returns None without credentials."""
        factory = InfrastructureFactory(
            Settings(
                storage=StorageSettings(root_directory=str(tmp_path)),
                semantic_search=SemanticSearchSettings(enabled=True),
            )
        )
        assert factory.get_text_embedding_service() is None

    def test_get_llm_service_openai(self, settings):
        """Test getting OpenAI LLM service."""
        factory = InfrastructureFactory(settings)
        assert isinstance(factory.get_llm_service(), OpenAILLMService)

    def test_get_llm_service_anthropic(self, settings):
        """Test getting Anthropic LLM service."""
        settings.llm = LLMSettings(
            provider="anthropic", api_key="test-key", model="claude-3-5-haiku-latest"
        )
        factory = InfrastructureFactory(settings)
        assert isinstance(factory.get_llm_service(), AnthropicLLMService)

    def test_llm_unconfigured(self, tmp_path):
        """Test LLM returns None without an API key."""
        factory = InfrastructureFactory(
            Settings(storage=StorageSettings(root_directory=str(tmp_path)))
        )
        assert factory.get_llm_service() is None

    def test_get_llm_service_unsupported(self):
        """Test unsupported LLM provider raises error."""
        settings = MagicMock()
        settings.llm.is_configured = True
        settings.llm.provider = "unsupported"
        factory = InfrastructureFactory(settings)

        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            factory.get_llm_service()

    def test_services_are_cached(self, settings):
        """Test services are cached and reused."""
        factory = InfrastructureFactory(settings)

        assert factory.get_entry_store() is factory.get_entry_store()
        assert factory.get_upload_store() is factory.get_upload_store()
        assert factory.get_llm_service() is factory.get_llm_service()

    async def test_close_all(self, settings):
        """Test closing provider clients."""
        factory = InfrastructureFactory(settings)
        llm = factory.get_llm_service()
        llm._client = MagicMock()
        llm._client.close = AsyncMock()
        factory.get_entry_store()

        await factory.close_all()

        llm._client.close.assert_awaited_once()
        assert factory._instances == {}

    async def test_close_all_logs_failures(self, settings):
        """Test a failing close does not stop the others."""
        factory = InfrastructureFactory(settings)
        llm = factory.get_llm_service()
        llm._client = MagicMock()
        llm._client.close = AsyncMock(side_effect=RuntimeError("boom"))
        embeddings = factory.get_text_embedding_service()
        embeddings._client = MagicMock()
        embeddings._client.close = AsyncMock()

        await factory.close_all()

        embeddings._client.close.assert_awaited_once()


class TestFactorySingleton:
    """Tests for factory singleton functions."""

    def test_get_factory_requires_settings_first_time(self):
        """Test get_factory requires settings on first call."""
        with pytest.raises(ValueError, match="Settings required"):
            get_factory()

    def test_get_factory_with_settings(self, settings):
        """Test get_factory with settings."""
        factory = get_factory(settings)
        assert isinstance(factory, InfrastructureFactory)

    def test_get_factory_returns_same_instance(self, settings):
        """Test get_factory returns same instance."""
        factory1 = get_factory(settings)
        factory2 = get_factory()
        assert factory1 is factory2

    def test_reset_factory(self, settings):
        """Test reset_factory clears singleton."""
        factory1 = get_factory(settings)
        reset_factory()
        factory2 = get_factory(settings)
        assert factory1 is not factory2
