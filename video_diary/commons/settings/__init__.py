"""Settings management module."""

from video_diary.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from video_diary.commons.settings.models import (
    AppSettings,
    AuthSettings,
    LangfuseSettings,
    LLMSettings,
    SemanticSearchSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    SummarySettings,
    TagSuggestionSettings,
    TelemetrySettings,
    TitleSettings,
    TranscriptionSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    "AuthSettings",
    # Storage
    "StorageSettings",
    # Enrichment
    "TranscriptionSettings",
    "LLMSettings",
    "SummarySettings",
    "TitleSettings",
    "TagSuggestionSettings",
    "SemanticSearchSettings",
    # Telemetry
    "TelemetrySettings",
    "LangfuseSettings",
]
