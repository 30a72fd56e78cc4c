"""Engine settings schema and loader.

Settings tune the form session (validation debounce, which answers feed the
scoring calculator, repeatable-group limits). They are loaded from a YAML
file whose path comes from the ``FORM_ENGINE_CONFIG`` environment variable;
without a file every setting keeps its default.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from form_engine.schemas.repeatable import MAX_REPEATABLE_COLUMNS, MAX_REPEATABLE_ROWS
from form_engine.scoring.calculator import DEFAULT_SCORING_FIELDS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FORM_ENGINE_CONFIG"


class EngineSettings(BaseModel):
    """Form engine settings.

    Attributes:
        validation_debounce_seconds: Quiet period before an edited field is
            validated. 0 validates synchronously.
        scoring_fields: Scoring input name -> answer field code.
        max_repeatable_rows: Upper bound on rows in any repeatable group.
        max_repeatable_columns: Upper bound on columns in any repeatable group.
    """

    validation_debounce_seconds: float = Field(
        default=0.3,
        ge=0,
        description="Debounce interval for field validation, in seconds",
    )
    scoring_fields: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_SCORING_FIELDS),
        description="Maps each scoring input to the field code holding it",
    )
    max_repeatable_rows: int = Field(
        default=MAX_REPEATABLE_ROWS,
        ge=1,
        le=MAX_REPEATABLE_ROWS,
        description="Maximum rows per repeatable group",
    )
    max_repeatable_columns: int = Field(
        default=MAX_REPEATABLE_COLUMNS,
        ge=1,
        le=MAX_REPEATABLE_COLUMNS,
        description="Maximum columns per repeatable group",
    )

    @field_validator("scoring_fields")
    @classmethod
    def validate_scoring_fields(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Only known scoring inputs; missing ones keep their default code."""
        unknown = set(v) - set(DEFAULT_SCORING_FIELDS)
        if unknown:
            raise ValueError(
                f"Unknown scoring inputs {sorted(unknown)}. "
                f"Valid inputs: {sorted(DEFAULT_SCORING_FIELDS)}"
            )
        return {**DEFAULT_SCORING_FIELDS, **v}


def load_engine_settings(config_path: Optional[Path] = None) -> EngineSettings:
    """Load engine settings from a YAML file.

    Args:
        config_path: Path to the settings file. Defaults to the path in
            ``FORM_ENGINE_CONFIG``.

    Returns:
        EngineSettings; defaults when no file is configured or it does not exist.

    Raises:
        ValueError: If the file exists but contains invalid settings.
    """
    if config_path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            logger.debug(f"{CONFIG_ENV_VAR} not set, using default engine settings")
            return EngineSettings()
        config_path = Path(env_path)

    config_path = Path(config_path)
    if not config_path.exists():
        logger.debug(f"No engine settings found at {config_path}")
        return EngineSettings()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            logger.warning(f"Empty engine settings at {config_path}")
            return EngineSettings()

        settings = EngineSettings.model_validate(data)
        logger.debug(f"Loaded engine settings from {config_path}")
        return settings

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in engine settings {config_path}: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load engine settings from {config_path}: {e}")


# Cached settings (loaded once per process)
_cached_settings: Optional[EngineSettings] = None


def get_engine_settings(force_reload: bool = False) -> EngineSettings:
    """Get the current engine settings (cached).

    Args:
        force_reload: If True, reload from disk even if cached.
    """
    global _cached_settings

    if force_reload or _cached_settings is None:
        _cached_settings = load_engine_settings()

    return _cached_settings


def reset_engine_settings_cache() -> None:
    """Reset the settings cache so the next lookup reads the file again."""
    global _cached_settings
    _cached_settings = None
