"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
No hardcoded values in code; all configuration comes from these sources.

The settings directory is <project root>/config/settings, where the project
root is the nearest ancestor of the working directory holding a .project_root
marker. SDC_CONFIG_DIR overrides this and points straight at a settings
directory (useful for installed copies of the CLI).

Secrets (.env):
    SDC_API_TOKEN (optional bearer token sent to every datacenter)

Settings (YAML):
    application.yaml   - App identity, API version, timeouts, retries, fan-out deadline
    concurrency.yaml   - Worker cap for one fan-out run
    datacenters.yaml   - Datacenter directory (name → CloudAPI URL)
    profiles.yaml      - Account profiles and the default profile
    logging.yaml       - Logging configuration
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from sdc_cli.core.config_schema import (
    ApplicationSchema,
    ConcurrencySchema,
    DatacentersSchema,
    LoggingSchema,
    ProfilesSchema,
)

CONFIG_DIR_ENV = "SDC_CONFIG_DIR"


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def find_settings_dir() -> Path:
    """Resolve the directory holding the YAML settings files."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return find_project_root() / "config" / "settings"


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from the settings directory."""
    config_path = find_settings_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Only passwords, tokens, and keys."""

    api_token: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="SDC_",
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
    Missing keys, wrong types, or unknown fields raise a clear error
    immediately instead of causing cryptic KeyErrors later.

    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._concurrency = _load_validated(ConcurrencySchema, "concurrency.yaml")
        self._datacenters = _load_validated(DatacentersSchema, "datacenters.yaml")
        self._profiles = _load_validated(ProfilesSchema, "profiles.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def concurrency(self) -> ConcurrencySchema:
        """Concurrency settings (fan-out worker cap)."""
        return self._concurrency

    @property
    def datacenters(self) -> DatacentersSchema:
        """Datacenter directory."""
        return self._datacenters

    @property
    def profiles(self) -> ProfilesSchema:
        """Account profiles."""
        return self._profiles

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path next to the settings directory."""
    env_path = find_settings_dir().parent / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()
