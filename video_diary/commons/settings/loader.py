"""Settings loader with hierarchical configuration support."""

import json
import os
from pathlib import Path
from typing import Any

from video_diary.commons.settings.models import Settings

ENV_PREFIX = "VIDEO_DIARY__"
CONFIG_DIR_ENV = "VIDEO_DIARY_CONFIG_DIR"


class SettingsLoader:
    """Builds a Settings instance from layered sources.

    Later layers win:
    1. ``appsettings.json``
    2. ``appsettings.{environment}.json``
    3. ``VIDEO_DIARY__`` environment variables
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory holding the appsettings files. Defaults to
                ``$VIDEO_DIARY_CONFIG_DIR`` or ``./config``.
            environment: Environment name used to pick the overlay file.
                Defaults to ``VIDEO_DIARY__APP__ENVIRONMENT`` or ``dev``.
        """
        self.config_dir = config_dir or Path(os.getenv(CONFIG_DIR_ENV, "config"))
        self.environment = environment or os.getenv(
            f"{ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Resolve every layer into a Settings instance."""
        merged: dict[str, Any] = {}
        for layer in (
            self._read_file("appsettings.json"),
            self._read_file(f"appsettings.{self.environment}.json"),
            self._env_overrides(),
        ):
            merged = _deep_merge(merged, layer)
        return Settings(**merged)

    def _env_overrides(self) -> dict[str, Any]:
        """Turn prefixed variables into a nested dictionary.

        ``VIDEO_DIARY__STORAGE__ROOT_DIRECTORY=/srv`` becomes
        ``{"storage": {"root_directory": "/srv"}}``.
        """
        overrides: dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            *parents, leaf = name[len(ENV_PREFIX) :].lower().split("__")
            node = overrides
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = _coerce(raw)
        return overrides

    def _read_file(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.is_file():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


def _coerce(value: str) -> Any:
    """Decode JSON lists and objects; scalars are left to pydantic."""
    # Lists and objects, e.g. SERVER__CORS_ORIGINS='["https://a"]'
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


# Global settings instance
_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        _settings = SettingsLoader(config_dir=config_dir, environment=environment).load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None
