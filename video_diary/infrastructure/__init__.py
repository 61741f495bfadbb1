"""Infrastructure layer - storage and external service implementations."""

from video_diary.infrastructure.embeddings import (
    EmbeddingResult,
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from video_diary.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from video_diary.infrastructure.llm import (
    AnthropicLLMService,
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
    OpenAILLMService,
)
from video_diary.infrastructure.storage import (
    ChunkedUploadStore,
    DeleteMode,
    DescriptionEmbedder,
    EntryStoreBase,
    FileSystemEntryStore,
)
from video_diary.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionError,
    TranscriptionResult,
    TranscriptionServiceBase,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Storage
    "EntryStoreBase",
    "FileSystemEntryStore",
    "ChunkedUploadStore",
    "DeleteMode",
    "DescriptionEmbedder",
    # Transcription
    "TranscriptionServiceBase",
    "TranscriptionResult",
    "TranscriptionError",
    "OpenAIWhisperTranscription",
    # Embeddings
    "EmbeddingServiceBase",
    "EmbeddingResult",
    "OpenAIEmbeddingService",
    # LLM
    "LLMServiceBase",
    "LLMResponse",
    "LLMUsage",
    "Message",
    "MessageRole",
    "OpenAILLMService",
    "AnthropicLLMService",
]
