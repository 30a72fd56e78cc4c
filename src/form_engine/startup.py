"""Centralized initialization for form_engine entry points.

This module provides a single point of initialization for:
- Environment variables (.env loading)
- Engine settings resolution (``FORM_ENGINE_CONFIG``)

The CLI and any embedding application should call ensure_initialized()
before building sessions so settings are read once and consistently.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from form_engine.config.settings import (
    CONFIG_ENV_VAR,
    EngineSettings,
    get_engine_settings,
    reset_engine_settings_cache,
)

logger = logging.getLogger(__name__)


@dataclass
class EngineState:
    """Process state after initialization."""

    project_root: Path
    settings: EngineSettings
    env_loaded: bool = False
    config_path: Optional[Path] = None


# Module-level state
_initialized: bool = False
_state: Optional[EngineState] = None


def _find_project_root(start_path: Optional[Path] = None) -> Path:
    """Find project root by looking for pyproject.toml.

    Args:
        start_path: Starting path for search. Defaults to the working directory.

    Returns:
        Project root directory, or start_path when no marker is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return current


def _load_env(project_root: Path) -> bool:
    """Load .env file from project root.

    Returns:
        True if .env was loaded, False otherwise.
    """
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded .env from {env_path}")
        return True
    logger.debug(f".env not found at {env_path}")
    return False


def ensure_initialized(start_path: Optional[Path] = None) -> EngineState:
    """Ensure the engine is initialized (idempotent).

    Loads .env and resolves engine settings on first call.
    Subsequent calls return cached state.

    Raises:
        ValueError: If the configured settings file is invalid.
    """
    global _initialized, _state

    if _initialized and _state is not None:
        return _state

    project_root = _find_project_root(start_path)
    env_loaded = _load_env(project_root)
    settings = get_engine_settings(force_reload=True)
    config_path = os.getenv(CONFIG_ENV_VAR)

    _state = EngineState(
        project_root=project_root,
        settings=settings,
        env_loaded=env_loaded,
        config_path=Path(config_path) if config_path else None,
    )
    _initialized = True
    logger.debug(
        f"Initialized form_engine (root={project_root}, "
        f"config={_state.config_path or 'defaults'})"
    )
    return _state


def get_state() -> EngineState:
    """Get current engine state.

    Raises:
        RuntimeError: If not initialized. Call ensure_initialized() first.
    """
    if not _initialized or _state is None:
        raise RuntimeError("startup not initialized. Call ensure_initialized() first.")
    return _state


def reset_initialization() -> None:
    """Forget cached state so the next ensure_initialized() starts over."""
    global _initialized, _state
    _initialized = False
    _state = None
    reset_engine_settings_cache()
