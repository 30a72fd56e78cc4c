"""Shared helpers for CLI commands."""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from form_engine.config.settings import EngineSettings
from form_engine.errors import TemplateLoadError
from form_engine.schemas.fields import FormTemplate
from form_engine.schemas.submission import DraftSnapshot
from form_engine.startup import ensure_initialized as _ensure_initialized
from form_engine.templates.loader import load_draft, load_template

logger = logging.getLogger(__name__)


def ensure_initialized() -> EngineSettings:
    """Initialize environment and return the engine settings.

    Exits with status 1 when the configured settings file is invalid.
    """
    try:
        return _ensure_initialized().settings
    except ValueError as e:
        from form_engine.cli._console import print_err
        print_err(str(e))
        raise SystemExit(1)


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=None,  # Use default stderr
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def read_template_or_exit(path: str) -> FormTemplate:
    """Load a template, printing the error and exiting on failure."""
    try:
        return load_template(Path(path))
    except TemplateLoadError as e:
        from form_engine.cli._console import print_err
        print_err(str(e))
        raise SystemExit(1)


def read_draft_or_exit(path: Optional[str]) -> DraftSnapshot:
    """Load a draft (empty when path is None), exiting on failure."""
    if path is None:
        return DraftSnapshot()
    try:
        return load_draft(Path(path))
    except TemplateLoadError as e:
        from form_engine.cli._console import print_err
        print_err(str(e))
        raise SystemExit(1)
