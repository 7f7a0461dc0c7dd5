"""
Root Pytest Fixtures.

Shared fixtures available to all test types. Tests run from the project
root so the real config/settings/*.yaml files are loaded; secrets come
from the environment instead of config/.env.
"""

from collections.abc import Generator

import pytest

from lingo.core.config import get_app_config, get_settings


@pytest.fixture(autouse=True)
def test_secrets(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Provide dummy secrets and a fresh settings cache for every test."""
    monkeypatch.setenv("SUPABASE_ANON_KEY", "test-anon-key")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
