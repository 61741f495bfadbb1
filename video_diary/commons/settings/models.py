"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "video-diary-server"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/api"
    docs_enabled: bool = True
    max_upload_chunk_mb: int = Field(default=64, ge=1)


class AuthSettings(BaseModel):
    """Settings for the externally authenticated user identity.

    The server never performs a login. When ``trust_user_header`` is set,
    the reverse proxy in front of it is expected to place the authenticated
    user name in ``user_header``; everything else uses the default segment.
    """

    trust_user_header: bool = False
    user_header: str = "X-Forwarded-User"


class StorageSettings(BaseModel):
    """Filesystem entry storage settings."""

    root_directory: str = "data/entries"
    index_file_name: str = "entries.json"
    file_name_format: str = "%Y-%b-%d %H.%M.%S"
    default_extension: str = ".webm"
    upload_overflow_tolerance_bytes: int = 1024 * 1024


class TranscriptionSettings(BaseModel):
    """Transcription service settings."""

    enabled: bool = False
    provider: Literal["openai_whisper"] = "openai_whisper"
    api_key: str = ""
    base_url: str | None = None
    model: str = "whisper-1"
    default_language: str = "en-US"
    timeout_seconds: int = 300

    @property
    def is_active(self) -> bool:
        """Whether transcription is enabled and has credentials."""
        return self.enabled and bool(self.api_key)


class LLMSettings(BaseModel):
    """LLM service settings."""

    provider: Literal["openai", "anthropic"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.2, ge=0, le=2)
    max_tokens: int = 1024
    timeout_seconds: int = 60

    @property
    def is_configured(self) -> bool:
        """Whether a provider can be constructed from these settings."""
        return bool(self.api_key)


class SummarySettings(BaseModel):
    """Description (summary) generation settings."""

    enabled: bool = False
    system_prompt: str | None = None
    max_tokens: int = 400


class TitleSettings(BaseModel):
    """Title generation settings."""

    enabled: bool = False
    system_prompt: str | None = None
    max_tokens: int = 40


class TagSuggestionSettings(BaseModel):
    """Favorite tag suggestion settings."""

    enabled: bool = False
    system_prompt: str | None = None
    max_tokens: int = 200


class SemanticSearchSettings(BaseModel):
    """Embedding-backed search settings."""

    enabled: bool = False
    provider: Literal["openai"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    model: str = "text-embedding-3-small"
    dimensions: int = 1536
    result_limit: int = Field(default=25, ge=1)

    @property
    def is_active(self) -> bool:
        """Whether embeddings can be generated."""
        return self.enabled and bool(self.api_key)


class LangfuseSettings(BaseModel):
    """Langfuse LLM tracing settings."""

    enabled: bool = False
    public_key: str = ""
    secret_key: str = ""
    host: str = "https://cloud.langfuse.com"
    debug: bool = False
    sample_rate: float = Field(default=1.0, ge=0, le=1)
    flush_at: int = 15
    flush_interval: float = 0.5


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"
    langfuse: LangfuseSettings = Field(default_factory=LangfuseSettings)


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    summaries: SummarySettings = Field(default_factory=SummarySettings)
    titles: TitleSettings = Field(default_factory=TitleSettings)
    tag_suggestions: TagSuggestionSettings = Field(
        default_factory=TagSuggestionSettings
    )
    semantic_search: SemanticSearchSettings = Field(
        default_factory=SemanticSearchSettings
    )
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_DIARY__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
