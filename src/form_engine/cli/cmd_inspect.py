"""Inspect command: list the fields of a template with their behavior."""

from typing import Optional

import typer

from form_engine.cli._app import app
from form_engine.cli._common import ensure_initialized, read_template_or_exit, setup_logging
from form_engine.cli._console import output_table
from form_engine.engine.field_kinds import get_field_kind
from form_engine.engine.normalizer import normalize_field
from form_engine.schemas.conditional import ConditionalConfig


def _describe_conditional(config: Optional[ConditionalConfig]) -> str:
    if config is None or not config.rules:
        return ""
    joiner = f" {config.logic.value} "
    return joiner.join(
        f"{rule.action.value} if {rule.field} {rule.operator.value}"
        + ("" if rule.value is None else f" {rule.value!r}")
        for rule in config.rules
    )


@app.command("inspect", help="List the sections and fields of a form template.")
def inspect_cmd(
    ctx: typer.Context,
    template_path: str = typer.Argument(..., help="Form template (YAML or JSON)"),
):
    """Show each field's kind, widget, base requiredness and conditional rules."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    template = read_template_or_exit(template_path)

    rows = []
    for section in template.ordered_sections():
        for field in section.ordered_fields():
            normalized = normalize_field(field)
            rows.append({
                "section": section.code,
                "field_code": field.field_code,
                "label": field.label,
                "kind": field.type.value,
                "widget": get_field_kind(field.type).widget,
                "required": field.is_required,
                "rules": _describe_conditional(normalized.conditional),
            })

    output_table(
        rows,
        ctx=ctx,
        title=f"{template.name} v{template.version}",
        columns=["section", "field_code", "label", "kind", "widget", "required", "rules"],
    )
