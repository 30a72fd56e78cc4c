"""Rich console singleton and output helpers."""

import json as json_mod
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from form_engine.schemas.scores import DerivedScores, Recommendation

# Status/progress to stderr so it doesn't pollute piped JSON output
console = Console(stderr=True)

# Data output to stdout (pipeable to jq)
stdout_console = Console()

_RECOMMENDATION_STYLES = {
    Recommendation.PROCEED: "green",
    Recommendation.CONSIDER_ALTERNATIVE: "yellow",
    Recommendation.CLOSE: "red",
}


def print_ok(msg: str) -> None:
    """Print a success message to stderr."""
    console.print(f"[green]✓[/green] {msg}")


def print_err(msg: str) -> None:
    """Print an error message to stderr."""
    console.print(f"[red]✗[/red] {msg}")


def print_warn(msg: str) -> None:
    """Print a warning message to stderr."""
    console.print(f"[yellow]![/yellow] {msg}")


def output_result(data: dict, *, ctx: typer.Context, title: str = "") -> None:
    """Print result as JSON (stdout) or a Rich panel (stderr)."""
    if ctx.obj.get("json"):
        stdout_console.print_json(data=data)
    else:
        formatted = json_mod.dumps(data, indent=2, ensure_ascii=False, default=str)
        if title:
            console.print(Panel(formatted, title=title, border_style="blue"))
        else:
            console.print(formatted)


def output_table(
    rows: List[Dict], *, ctx: typer.Context, title: str = "", columns: Optional[List[str]] = None
) -> None:
    """Print rows as JSON array or Rich table."""
    if ctx.obj.get("json"):
        stdout_console.print_json(data=rows)
        return

    if not rows:
        console.print("[dim]No data[/dim]")
        return

    cols = columns or list(rows[0].keys())
    table = Table(title=title, show_lines=False)
    for col in cols:
        table.add_column(col)
    for row in rows:
        table.add_row(*[str(row.get(c, "")) for c in cols])
    console.print(table)


def output_scores(scores: DerivedScores, *, ctx: typer.Context) -> None:
    """Print derived scores as JSON or a score table with the recommendation."""
    if ctx.obj.get("json"):
        stdout_console.print_json(data=scores.model_dump(mode="json"))
        return

    table = Table(title="Derived scores", show_header=False)
    table.add_column("Score")
    table.add_column("Value", justify="right")
    table.add_row("Impact", f"{scores.impact_score:.2f}")
    table.add_row("Value", f"{scores.value_score:.2f}")
    table.add_row("Market", f"{scores.market_score:.2f}")
    table.add_row("Overall", f"{scores.overall_score:.2f}")
    console.print(table)

    style = _RECOMMENDATION_STYLES.get(scores.recommendation, "white")
    console.print(f"Recommendation: [{style}]{scores.recommendation.value}[/{style}]")
    console.print(f"[dim]{scores.recommendation_text}[/dim]")
