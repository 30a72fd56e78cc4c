"""Root Typer application with global options."""

import os
from typing import Optional

import typer

from form_engine import __version__
from form_engine.config.settings import CONFIG_ENV_VAR

app = typer.Typer(
    name="form-engine",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"form-engine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug-level logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Warnings and errors only"),
    json_output: bool = typer.Option(False, "--json", help="Machine-readable output on stdout"),
    config: Optional[str] = typer.Option(
        None, "--config", "-c",
        help=f"Engine settings YAML (overrides ${CONFIG_ENV_VAR})",
    ),
    version: bool = typer.Option(
        False, "--version",
        callback=_print_version, is_eager=True,
        help="Show the version and exit",
    ),
):
    """Score, validate and export configuration-driven evaluation forms."""
    if config:
        os.environ[CONFIG_ENV_VAR] = config
    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, quiet=quiet, json=json_output)
