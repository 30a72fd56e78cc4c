"""Validate command: check saved answers against a template."""

from typing import Optional

import typer

from form_engine.cli._app import app
from form_engine.cli._common import (
    ensure_initialized,
    read_draft_or_exit,
    read_template_or_exit,
    setup_logging,
)
from form_engine.cli._console import console, output_result, output_table, print_err, print_ok
from form_engine.state.session import FormSession


@app.command("validate", help="Validate saved answers against a form template.")
def validate_cmd(
    ctx: typer.Context,
    template_path: str = typer.Argument(..., help="Form template (YAML or JSON)"),
    answers_path: Optional[str] = typer.Argument(
        None,
        help="Answers file (YAML or JSON); omit to validate an empty form",
    ),
    section: Optional[int] = typer.Option(
        None, "--section",
        help="Validate a single section (0-based) instead of the whole form",
    ),
):
    """Run the same checks a submit would, and exit 1 when any field fails."""
    settings = ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    template = read_template_or_exit(template_path)
    draft = read_draft_or_exit(answers_path)

    session_settings = settings.model_copy(update={"validation_debounce_seconds": 0})
    with FormSession(template, settings=session_settings, initial_data=draft) as session:
        if section is not None:
            if not 0 <= section < template.section_count:
                print_err(f"Section {section} out of range (0-{template.section_count - 1})")
                raise SystemExit(1)
            errors = session.validate_section(section)
        else:
            errors = session.validate_all()

        if ctx.obj["json"]:
            output_result({"valid": not errors, "errors": errors}, ctx=ctx)
        elif errors:
            rows = [
                {"Field": code, "Label": session.get_field(code).label, "Error": message}
                for code, message in errors.items()
            ]
            output_table(rows, ctx=ctx, title="Validation errors")
        elif not ctx.obj["quiet"]:
            print_ok(f"All visible fields of '{template.name}' are valid")

    if errors:
        if not ctx.obj["json"]:
            console.print(f"{len(errors)} field(s) failed validation")
        raise SystemExit(1)
