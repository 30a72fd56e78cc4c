"""CLI package: Typer-based command-line interface.

Usage:
    form-engine --help
    python -m form_engine.cli score answers.yaml
"""

from form_engine.cli._app import app

# Register command modules (side-effect imports)
import form_engine.cli.cmd_score  # noqa: F401
import form_engine.cli.cmd_validate  # noqa: F401
import form_engine.cli.cmd_export  # noqa: F401
import form_engine.cli.cmd_inspect  # noqa: F401

__all__ = ["app"]
