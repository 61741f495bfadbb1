"""Unit tests for settings models and loader."""

import json
import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from video_diary.commons.settings.loader import (
    SettingsLoader,
    _deep_merge,
    get_settings,
    reset_settings,
)
from video_diary.commons.settings.models import (
    AppSettings,
    AuthSettings,
    LLMSettings,
    SemanticSearchSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    TelemetrySettings,
    TranscriptionSettings,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "video-diary-server"
        assert settings.version == "0.1.0"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            AppSettings(log_level="TRACE")  # type: ignore[arg-type]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_values(self):
        settings = ServerSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.api_prefix == "/api"
        assert settings.max_upload_chunk_mb == 64

    def test_port_validation(self):
        assert ServerSettings(port=3000).port == 3000

        with pytest.raises(ValueError):
            ServerSettings(port=0)

        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestStorageSettings:
    """Tests for StorageSettings model."""

    def test_default_values(self):
        settings = StorageSettings()
        assert settings.root_directory == "data/entries"
        assert settings.index_file_name == "entries.json"
        assert settings.default_extension == ".webm"
        assert settings.upload_overflow_tolerance_bytes == 1024 * 1024


class TestFeatureSettings:
    """Tests for provider-backed feature switches."""

    def test_auth_header_not_trusted_by_default(self):
        assert AuthSettings().trust_user_header is False

    def test_transcription_requires_key(self):
        assert TranscriptionSettings(enabled=True).is_active is False
        assert TranscriptionSettings(enabled=True, api_key="sk").is_active is True
        assert TranscriptionSettings(api_key="sk").is_active is False

    def test_llm_configured_with_key(self):
        assert LLMSettings().is_configured is False
        assert LLMSettings(api_key="sk").is_configured is True

    def test_llm_temperature_validation(self):
        with pytest.raises(ValueError):
            LLMSettings(temperature=2.5)

    def test_semantic_search_requires_key(self):
        assert SemanticSearchSettings(enabled=True).is_active is False
        assert SemanticSearchSettings(enabled=True, api_key="sk").is_active is True

    def test_semantic_search_limit(self):
        assert SemanticSearchSettings().result_limit == 25
        with pytest.raises(ValueError):
            SemanticSearchSettings(result_limit=0)


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_values(self):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.server, ServerSettings)
        assert isinstance(settings.storage, StorageSettings)
        assert isinstance(settings.transcription, TranscriptionSettings)
        assert isinstance(settings.llm, LLMSettings)
        assert isinstance(settings.semantic_search, SemanticSearchSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)
        assert settings.summaries.enabled is False
        assert settings.titles.enabled is False
        assert settings.tag_suggestions.enabled is False


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_empty_config(self):
        with TemporaryDirectory() as tmpdir:
            loader = SettingsLoader(config_dir=Path(tmpdir), environment="dev")
            settings = loader.load()
            assert settings.app.name == "video-diary-server"

    def test_load_base_config(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            base_config = {
                "app": {"name": "test-app", "environment": "dev"},
                "storage": {"root_directory": "/srv/diary"},
            }
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump(base_config, f)

            loader = SettingsLoader(config_dir=config_dir, environment="dev")
            settings = loader.load()
            assert settings.app.name == "test-app"
            assert settings.storage.root_directory == "/srv/diary"

    def test_load_environment_override(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)

            base_config = {
                "app": {"name": "test-app"},
                "server": {"port": 8000},
                "summaries": {"enabled": False},
            }
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump(base_config, f)

            prod_config = {
                "app": {"log_level": "WARNING"},
                "server": {"docs_enabled": False},
                "summaries": {"enabled": True},
            }
            with (config_dir / "appsettings.prod.json").open("w") as f:
                json.dump(prod_config, f)

            loader = SettingsLoader(config_dir=config_dir, environment="prod")
            settings = loader.load()

            # Base values
            assert settings.app.name == "test-app"
            assert settings.server.port == 8000
            # Overridden values
            assert settings.app.log_level == "WARNING"
            assert settings.server.docs_enabled is False
            assert settings.summaries.enabled is True

    def test_environment_variables_win(self, monkeypatch):
        monkeypatch.setenv("VIDEO_DIARY__SERVER__PORT", "9100")
        monkeypatch.setenv("VIDEO_DIARY__AUTH__TRUST_USER_HEADER", "true")
        monkeypatch.setenv("VIDEO_DIARY__STORAGE__ROOT_DIRECTORY", "/tmp/diary")

        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            with (config_dir / "appsettings.json").open("w") as f:
                json.dump({"server": {"port": 8000}}, f)

            settings = SettingsLoader(config_dir=config_dir, environment="dev").load()

        assert settings.server.port == 9100
        assert settings.auth.trust_user_header is True
        assert settings.storage.root_directory == "/tmp/diary"

    def test_deep_merge(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        result = _deep_merge(base, override)

        assert result == {"a": {"b": 10, "c": 2, "e": 4}, "d": 3, "f": 5}


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()
        # Clean up env vars
        for key in list(os.environ.keys()):
            if key.startswith("VIDEO_DIARY__"):
                del os.environ[key]

    def test_get_settings_cached(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir))
            assert settings1 is settings2

    def test_get_settings_reload(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            settings2 = get_settings(config_dir=Path(tmpdir), reload=True)
            assert settings1 is not settings2

    def test_reset_settings(self):
        with TemporaryDirectory() as tmpdir:
            settings1 = get_settings(config_dir=Path(tmpdir))
            reset_settings()
            settings2 = get_settings(config_dir=Path(tmpdir))
            assert settings1 is not settings2
