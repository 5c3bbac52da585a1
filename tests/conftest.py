"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Tests run from the project root, so config/settings/*.yaml and the
.project_root marker of this checkout are what the config loader sees
unless a test points SDC_CONFIG_DIR elsewhere.
"""

from collections.abc import Generator

import pytest

from sdc_cli.core import logging as logging_module
from sdc_cli.core.config import get_app_config, get_settings


@pytest.fixture(autouse=True)
def _clear_config_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Each test gets a fresh config load and no inherited profile/config overrides."""
    monkeypatch.delenv("SDC_PROFILE", raising=False)
    monkeypatch.delenv("SDC_CONFIG_DIR", raising=False)
    monkeypatch.delenv("SDC_API_TOKEN", raising=False)
    get_settings.cache_clear()
    get_app_config.cache_clear()
    logging_module._logging_config = None
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
    logging_module._logging_config = None
