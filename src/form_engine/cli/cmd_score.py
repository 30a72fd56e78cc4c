"""Score command: compute derived scores from an answer file."""

import typer

from form_engine.cli._app import app
from form_engine.cli._common import ensure_initialized, read_draft_or_exit, setup_logging
from form_engine.cli._console import output_scores
from form_engine.scoring.calculator import calculate_scores_from_answers


@app.command("score", help="Compute impact, value and overall scores from saved answers.")
def score_cmd(
    ctx: typer.Context,
    answers_path: str = typer.Argument(
        ...,
        help="YAML or JSON file with answers (bare mapping or {answers, rows})",
    ),
):
    """Score the six criterion answers of a draft and print the recommendation."""
    settings = ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    draft = read_draft_or_exit(answers_path)
    scores = calculate_scores_from_answers(draft.answers, settings.scoring_fields)
    output_scores(scores, ctx=ctx)
