"""Configuration for the form engine."""

from form_engine.config.settings import (
    CONFIG_ENV_VAR,
    EngineSettings,
    get_engine_settings,
    load_engine_settings,
    reset_engine_settings_cache,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "EngineSettings",
    "get_engine_settings",
    "load_engine_settings",
    "reset_engine_settings_cache",
]
