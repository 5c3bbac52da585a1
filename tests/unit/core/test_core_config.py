"""
Unit tests for configuration loading.

Tests cover:
- The settings files shipped with the project load and validate
- SDC_CONFIG_DIR overrides the settings directory
- Schema validation errors for unknown keys and inconsistent profiles
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sdc_cli.core.config import (
    AppConfig,
    find_project_root,
    find_settings_dir,
    get_app_config,
    get_settings,
    load_yaml_config,
)
from sdc_cli.core.config_schema import DatacentersSchema, ProfilesSchema

SETTINGS_FILES = {
    "application.yaml": """
name: sdc-test
version: 9.9.9
description: test
api_version: "~7"
timeouts:
  request: 2
retries:
  attempts: 2
  wait_min: 0
  wait_max: 1
fanout:
  timeout: 10
""",
    "concurrency.yaml": """
thread_pool:
  max_workers: 4
""",
    "datacenters.yaml": """
datacenters:
  lab-1: http://lab-1.local
""",
    "profiles.yaml": """
default: lab
profiles:
  - name: lab
    user: tester
    key_id: "00:11"
""",
    "logging.yaml": """
level: INFO
format: json
handlers:
  console:
    enabled: true
  file:
    enabled: false
    path: logs/sdc.jsonl
    max_bytes: 1024
    backup_count: 1
""",
}


@pytest.fixture
def settings_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A complete settings directory outside the project, selected via SDC_CONFIG_DIR."""
    directory = tmp_path / "config" / "settings"
    directory.mkdir(parents=True)
    for name, content in SETTINGS_FILES.items():
        (directory / name).write_text(content)
    monkeypatch.setenv("SDC_CONFIG_DIR", str(directory))
    return directory


class TestProjectConfig:
    """The configuration shipped in config/settings."""

    def test_project_root_has_marker(self):
        """find_project_root locates the directory holding .project_root."""
        root = find_project_root()
        assert (root / ".project_root").exists()
        assert find_settings_dir() == root / "config" / "settings"

    def test_shipped_config_validates(self):
        """Every shipped YAML file passes its schema."""
        config = AppConfig()

        assert config.application.name == "sdc-cli"
        assert config.application.retries.attempts >= 1
        assert config.datacenters.datacenters
        assert config.profiles.default in [p.name for p in config.profiles.profiles]

    def test_shipped_pool_is_uncapped(self):
        """Every datacenter gets its own worker unless a cap is configured."""
        assert AppConfig().concurrency.thread_pool.max_workers is None

    def test_app_config_is_cached(self):
        """get_app_config returns the same instance until the cache is cleared."""
        assert get_app_config() is get_app_config()


class TestConfigDirOverride:
    """SDC_CONFIG_DIR points the loader at another settings directory."""

    def test_loads_from_override(self, settings_dir):
        """All settings come from the override directory."""
        config = AppConfig()

        assert config.application.name == "sdc-test"
        assert config.application.fanout.timeout == 10
        assert config.concurrency.thread_pool.max_workers == 4
        assert config.datacenters.datacenters == {"lab-1": "http://lab-1.local"}
        assert config.profiles.default == "lab"
        assert config.logging.format == "json"

    def test_missing_file(self, settings_dir):
        """A missing settings file raises FileNotFoundError naming it."""
        (settings_dir / "profiles.yaml").unlink()

        with pytest.raises(FileNotFoundError, match="profiles.yaml"):
            AppConfig()

    def test_empty_file_loads_as_empty_dict(self, settings_dir):
        """An empty YAML file is an empty mapping, not None."""
        (settings_dir / "empty.yaml").write_text("")

        assert load_yaml_config("empty.yaml") == {}

    def test_unknown_key_rejected(self, settings_dir):
        """Unknown keys name the offending file."""
        (settings_dir / "concurrency.yaml").write_text("thread_pool:\n  max_workers: 4\n  queue: 10\n")

        with pytest.raises(ValueError, match="Invalid configuration in concurrency.yaml"):
            AppConfig()

    def test_empty_profile_dcs_rejected(self, settings_dir):
        """dcs: [] would query nothing; the file is refused instead."""
        (settings_dir / "profiles.yaml").write_text(
            "default: lab\nprofiles:\n  - name: lab\n    user: tester\n    key_id: \"00:11\"\n    dcs: []\n"
        )

        with pytest.raises(ValueError, match="Invalid configuration in profiles.yaml"):
            AppConfig()

    def test_token_read_from_env_file(self, settings_dir, monkeypatch):
        """SDC_API_TOKEN is read from the .env next to the settings directory."""
        (settings_dir.parent / ".env").write_text("SDC_API_TOKEN=from-file\n")

        assert get_settings().api_token == "from-file"

    def test_token_env_var_wins(self, settings_dir, monkeypatch):
        """Environment variables take precedence over the .env file."""
        (settings_dir.parent / ".env").write_text("SDC_API_TOKEN=from-file\n")
        monkeypatch.setenv("SDC_API_TOKEN", "from-env")

        assert get_settings().api_token == "from-env"


class TestSchemas:
    """Cross-field schema rules."""

    def test_datacenter_url_must_be_http(self):
        with pytest.raises(ValidationError, match="non-HTTP url"):
            DatacentersSchema(datacenters={"lab-1": "ftp://lab-1.local"})

    def test_default_profile_must_exist(self):
        with pytest.raises(ValidationError, match="is not declared"):
            ProfilesSchema(default="missing", profiles=[{"name": "a", "user": "u", "key_id": "k"}])

    def test_profile_names_unique(self):
        with pytest.raises(ValidationError, match="unique"):
            ProfilesSchema(
                default="a",
                profiles=[
                    {"name": "a", "user": "u", "key_id": "k"},
                    {"name": "a", "user": "v", "key_id": "k"},
                ],
            )

    def test_profile_without_dcs_means_all(self):
        profiles = ProfilesSchema(default="a", profiles=[{"name": "a", "user": "u", "key_id": "k"}])

        assert profiles.profiles[0].dcs is None
