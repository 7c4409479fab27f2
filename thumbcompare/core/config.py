"""Configuration settings for ThumbCompare."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from thumbcompare.core.constants import (
    DEFAULT_LATEST_COUNT,
    MAX_LATEST_COUNT,
    MIN_LATEST_COUNT,
    YOUTUBE_API_HOSTS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables and config.yaml."""

    model_config = SettingsConfigDict(  # type: ignore[assignment]
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars not defined in model
    )

    # YouTube Data API
    youtube_api_key: str = ""  # Used when the credential store has no key
    youtube_api_hosts: list[str] = list(YOUTUBE_API_HOSTS)
    youtube_api_timeout: float = 30.0
    youtube_search_fallback: bool = False

    # Feed
    feed_default_latest_count: int = DEFAULT_LATEST_COUNT
    feed_min_latest_count: int = MIN_LATEST_COUNT
    feed_max_latest_count: int = MAX_LATEST_COUNT

    # Local storage
    data_dir: str = "~/.thumbcompare"
    image_cache_dir: str | None = None
    credentials_file: str | None = None

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Convenience properties
    @property
    def data_path(self) -> Path:
        """Get data directory as an expanded Path."""
        return Path(self.data_dir).expanduser()

    @property
    def image_cache_path(self) -> Path:
        """Get image cache directory (defaults to <data_dir>/cache)."""
        if self.image_cache_dir:
            return Path(self.image_cache_dir).expanduser()
        return self.data_path / "cache"

    @property
    def credentials_path(self) -> Path:
        """Get credential store file (defaults to <data_dir>/credentials.json)."""
        if self.credentials_file:
            return Path(self.credentials_file).expanduser()
        return self.data_path / "credentials.json"

    def clamp_latest_count(self, value: int) -> int:
        """Clamp a requested per-channel video count to the allowed range."""
        return max(self.feed_min_latest_count, min(self.feed_max_latest_count, value))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_yaml_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ./config.yaml or ./config.yml

    Returns:
        Dictionary with configuration values
    """

    if config_path is None:
        possible_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".thumbcompare" / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None or not Path(config_path).exists():
        return {}

    try:
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"Warning: Failed to load config file: {e}")
        return {}


def apply_yaml_config(settings: Settings, config: dict[str, Any]) -> Settings:
    """
    Apply YAML configuration to settings object.

    Environment variables take precedence over YAML config: a YAML value is
    only applied while the setting still holds its default.

    Args:
        settings: Settings object to update
        config: Configuration dictionary from YAML

    Returns:
        Updated Settings object
    """
    defaults = Settings.model_fields

    def _apply(field: str, value: Any) -> None:
        if getattr(settings, field) == defaults[field].default:
            setattr(settings, field, value)

    # YouTube API
    if "youtube_api" in config:
        yt = config["youtube_api"] or {}
        if "hosts" in yt:
            _apply("youtube_api_hosts", [str(h) for h in yt["hosts"]])
        if "timeout" in yt:
            _apply("youtube_api_timeout", float(yt["timeout"]))
        if "search_fallback" in yt:
            _apply("youtube_search_fallback", bool(yt["search_fallback"]))

    # Feed
    if "feed" in config:
        feed = config["feed"] or {}
        if "latest_count" in feed:
            _apply("feed_default_latest_count", int(feed["latest_count"]))
        if "min_latest_count" in feed:
            _apply("feed_min_latest_count", int(feed["min_latest_count"]))
        if "max_latest_count" in feed:
            _apply("feed_max_latest_count", int(feed["max_latest_count"]))

    # Storage
    if "storage" in config:
        storage = config["storage"] or {}
        if "data_dir" in storage:
            _apply("data_dir", str(storage["data_dir"]))
        if "image_cache_dir" in storage:
            _apply("image_cache_dir", str(storage["image_cache_dir"]))
        if "credentials_file" in storage:
            _apply("credentials_file", str(storage["credentials_file"]))

    # Logging
    if "logging" in config:
        logging_cfg = config["logging"] or {}
        if "level" in logging_cfg:
            _apply("log_level", str(logging_cfg["level"]).upper())
        if "file" in logging_cfg:
            _apply("log_file", str(logging_cfg["file"]))

    return settings


def get_settings_with_yaml(config_path: Path | str | None = None) -> Settings:
    """
    Get settings with YAML configuration applied.

    Priority: Environment Variables > YAML Config > Defaults

    Args:
        config_path: Optional path to config file

    Returns:
        Settings object with YAML configuration applied
    """
    settings = get_settings()
    config = load_yaml_config(config_path)
    return apply_yaml_config(settings, config)
