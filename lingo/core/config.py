"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
No hardcoded values in code; all configuration comes from these sources.

Secrets (.env):
    SUPABASE_ANON_KEY, GEMINI_API_KEY

Settings (YAML):
    application.yaml   - App identity, timeouts
    store.yaml         - Remote store URL, table, read retry policy
    ai.yaml            - Model names, quiz sizing, speech language
    notes.yaml         - Autosave debounce and flush-on-close policy
    logging.yaml       - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lingo.core.config_schema import (
    AISchema,
    ApplicationSchema,
    LoggingSchema,
    NotesSchema,
    StoreSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Only keys and tokens."""

    supabase_anon_key: str
    gemini_api_key: str

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._store = _load_validated(StoreSchema, "store.yaml")
        self._ai = _load_validated(AISchema, "ai.yaml")
        self._notes = _load_validated(NotesSchema, "notes.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def store(self) -> StoreSchema:
        """Remote store settings."""
        return self._store

    @property
    def ai(self) -> AISchema:
        """Generative AI settings."""
        return self._ai

    @property
    def notes(self) -> NotesSchema:
        """Note editor settings (autosave)."""
        return self._notes

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_store_base_url() -> tuple[str, float]:
    """
    Get the remote store base URL and timeout from configuration.

    Returns:
        Tuple of (base_url, timeout_seconds).
    """
    config = get_app_config()
    return config.store.url.rstrip("/"), float(config.application.timeouts.store)
