"""Pytest fixtures shared by the form engine tests."""

import pytest

from form_engine.config.settings import (
    CONFIG_ENV_VAR,
    EngineSettings,
    reset_engine_settings_cache,
)
from form_engine.startup import reset_initialization


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep every test independent of the developer's settings and cached state."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    reset_initialization()
    yield
    reset_initialization()
    reset_engine_settings_cache()


@pytest.fixture
def sync_settings():
    """Settings that validate inline instead of after a debounce."""
    return EngineSettings(validation_debounce_seconds=0)
