"""Export command: build the printable structure of a filled-in form."""

from pathlib import Path
from typing import Optional

import typer

from form_engine.cli._app import app
from form_engine.cli._common import (
    ensure_initialized,
    read_draft_or_exit,
    read_template_or_exit,
    setup_logging,
)
from form_engine.cli._console import console, output_result, print_err, print_ok
from form_engine.export.printable import BLANK_STATUS, IN_PROGRESS_STATUS, build_printable_form


@app.command("export", help="Export a form and its answers as printable JSON.")
def export_cmd(
    ctx: typer.Context,
    template_path: str = typer.Argument(..., help="Form template (YAML or JSON)"),
    answers_path: Optional[str] = typer.Argument(
        None,
        help="Answers file (YAML or JSON); omit to export a blank form",
    ),
    status: Optional[str] = typer.Option(
        None, "--status",
        help="Submission status shown on the export (DRAFT, SUBMITTED, REVIEWED, ARCHIVED)",
    ),
    submission_id: Optional[str] = typer.Option(None, "--submission-id", help="Submission identifier"),
    submitted_by: Optional[str] = typer.Option(None, "--submitted-by", help="Reviewer name"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes"),
    output: Optional[str] = typer.Option(
        None,
        "-o", "--output",
        help="Write the export to this file instead of printing it",
    ),
):
    """Build sections, scoring breakdown and matrix point for document rendering."""
    settings = ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    template = read_template_or_exit(template_path)
    draft = read_draft_or_exit(answers_path)
    if status is None:
        status = BLANK_STATUS if answers_path is None else IN_PROGRESS_STATUS

    printable = build_printable_form(
        template,
        draft.answers,
        draft.rows,
        status=status.upper(),
        submission_id=submission_id,
        submitted_by=submitted_by,
        notes=notes,
        scoring_fields=settings.scoring_fields,
    )

    if output:
        output_path = Path(output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(printable.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            print_err(f"Export failed: {e}")
            raise SystemExit(1)
        if not ctx.obj["quiet"]:
            print_ok(f"Export complete: {output_path}")
            console.print(f"  Sections:       {len(printable.sections)}")
            console.print(f"  Questions:      {sum(len(s.questions) for s in printable.sections)}")
            console.print(f"  Recommendation: {printable.matrix.recommendation}")
        return

    output_result(printable.model_dump(mode="json"), ctx=ctx, title=template.name)
