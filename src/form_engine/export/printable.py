"""Printable export of a filled-in form.

Builds a render-ready structure for document export: ordered sections with
display text for every answer (option values replaced by their labels),
repeat-group tables, a scoring breakdown and the impact/value matrix point.
The export collaborator turns this into PDF or any other format.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from form_engine.engine.conditional import should_show_field
from form_engine.engine.normalizer import NormalizedField, normalize_field
from form_engine.schemas.fields import FieldConfig, FieldType, FormSection, FormTemplate
from form_engine.schemas.repeatable import DEFAULT_NOTE_KEY, ROW_ID_KEY, ROW_LABEL_KEY
from form_engine.schemas.scores import DerivedScores
from form_engine.schemas.submission import SubmissionStatus
from form_engine.scoring.calculator import (
    SCORE_MAX,
    SCORE_MIN,
    calculate_all_scores,
    extract_scoring_inputs,
)

logger = logging.getLogger(__name__)

BLANK_STATUS = "BLANK"
IN_PROGRESS_STATUS = "IN_PROGRESS"
EMPTY_ANSWER = "—"

_STATUS_LABELS = {
    SubmissionStatus.DRAFT.value: "Draft",
    SubmissionStatus.SUBMITTED.value: "Submitted",
    SubmissionStatus.REVIEWED.value: "Reviewed",
    SubmissionStatus.ARCHIVED.value: "Archived",
    BLANK_STATUS: "Blank Form",
}

CRITERION_WEIGHT = 0.5


# ── Printable schema ─────────────────────────────────────────────────


class PrintableMetadata(BaseModel):
    template_name: str
    template_version: str
    template_description: Optional[str] = None
    exported_at: str
    status_label: str
    submission_id: Optional[str] = None
    submitted_by: Optional[str] = None
    notes: Optional[str] = None


class PrintableCell(BaseModel):
    field: str
    value: str


class PrintableRow(BaseModel):
    index: int = Field(..., description="1-based row number")
    values: List[PrintableCell] = Field(default_factory=list)


class PrintableQuestion(BaseModel):
    field_code: str
    label: str
    help_text: Optional[str] = None
    is_required: bool = False
    type: FieldType
    answer_text: Optional[str] = Field(None, description="Display text; None for table answers")
    rows: Optional[List[PrintableRow]] = None


class PrintableSection(BaseModel):
    code: str
    title: str
    description: Optional[str] = None
    questions: List[PrintableQuestion] = Field(default_factory=list)


class ScoreRow(BaseModel):
    label: str
    score: str
    weight: Optional[str] = None
    total: Optional[str] = None
    category: Optional[str] = None


class ScoreBlock(BaseModel):
    key: str
    title: str
    rows: List[ScoreRow]
    summary_label: str
    summary_value: str


class ScoringBreakdown(BaseModel):
    blocks: List[ScoreBlock]
    market_sub_criteria: List[ScoreRow]
    impact_score: str
    value_score: str
    market_score: str
    overall_score: str


class ImpactValuePoint(BaseModel):
    impact_score: float
    value_score: float
    recommendation: str
    recommendation_text: str
    x: float = Field(..., description="0-1 across the chart")
    y: float = Field(..., description="0-1 up the chart")


class PrintableForm(BaseModel):
    metadata: PrintableMetadata
    sections: List[PrintableSection]
    derived_scores: Optional[DerivedScores] = None
    scoring: ScoringBreakdown
    matrix: ImpactValuePoint


# ── Value formatting ─────────────────────────────────────────────────


def format_value(value: Any) -> str:
    """Display text for a stored value.

    Booleans read Yes/No, lists are comma-joined, records become
    ``key: value`` lines and non-finite numbers render empty.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(text for text in (format_value(item) for item in value) if text)
    if isinstance(value, Mapping):
        return "\n".join(f"{key}: {format_value(item)}" for key, item in value.items())
    return str(value)


def format_answer(field: FieldConfig, value: Any) -> str:
    """Display text for an answer, with option values shown as their labels."""
    if value is None:
        return ""

    if field.type in (FieldType.MULTI_SELECT, FieldType.CHECKBOX_GROUP):
        values = value if isinstance(value, list) else [value]
        labels = [label for label in (field.option_label(item) for item in values) if label]
        if labels:
            return ", ".join(labels)
        return ", ".join(format_value(item) for item in values)

    if field.type == FieldType.SINGLE_SELECT:
        label = field.option_label(value)
        return label if label is not None else format_value(value)

    return format_value(value)


def clamp_score(value: Any) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or math.isnan(value):
        return SCORE_MIN
    return max(SCORE_MIN, min(SCORE_MAX, float(value)))


def _fmt(value: float) -> str:
    return f"{clamp_score(value):.2f}"


# ── Rows ─────────────────────────────────────────────────────────────


def _repeat_group_rows(rows: Optional[List[Mapping[str, Any]]]) -> Optional[List[PrintableRow]]:
    if not rows:
        return None
    return [
        PrintableRow(
            index=index + 1,
            values=[PrintableCell(field=key, value=format_value(value)) for key, value in row.items()],
        )
        for index, row in enumerate(rows)
    ]


def _selector_rows(
    normalized: NormalizedField, rows: Optional[List[Mapping[str, Any]]]
) -> Optional[List[PrintableRow]]:
    if not rows:
        return None

    config = normalized.group_config
    selector = config.selector_key
    note_keys = config.note_keys()
    note_column = config.get_column(note_keys[0]) if note_keys else config.note_column
    if note_keys:
        note_key = note_keys[0]
        note_header = note_column.label if note_column else note_key
    else:
        note_key = note_column.key if note_column else DEFAULT_NOTE_KEY
        note_header = note_column.label if note_column else "Notes"
    row_header = config.row_label or normalized.field.label
    template_labels = {row.id: row.label for row in config.rows}

    selected = [row for row in rows if row.get(selector)]
    if not selected:
        return None

    printable = []
    for index, row in enumerate(selected):
        identifier = row.get(ROW_ID_KEY) or row.get("rowId")
        label = row.get(ROW_LABEL_KEY)
        if not isinstance(label, str):
            label = template_labels.get(identifier) or identifier or row_header
        note = row.get(note_key)
        printable.append(
            PrintableRow(
                index=index + 1,
                values=[
                    PrintableCell(field=row_header, value=format_value(label)),
                    PrintableCell(
                        field=note_header, value=note if isinstance(note, str) else ""
                    ),
                ],
            )
        )
    return printable


# ── Sections ─────────────────────────────────────────────────────────


def _printable_question(
    field: FieldConfig,
    answers: Mapping[str, Any],
    rows: Mapping[str, List[Mapping[str, Any]]],
) -> Optional[PrintableQuestion]:
    normalized = normalize_field(field)
    if normalized.is_info_box:
        return None

    is_visible = should_show_field(normalized.conditional, answers)

    table: Optional[List[PrintableRow]] = None
    answer_text: Optional[str] = None
    if field.type == FieldType.REPEATABLE_GROUP:
        table = _repeat_group_rows(rows.get(field.field_code))
    elif field.type == FieldType.DATA_TABLE_SELECTOR:
        table = _selector_rows(normalized, rows.get(field.field_code))
    else:
        answer_text = format_answer(field, answers.get(field.field_code))

    if field.type in (FieldType.REPEATABLE_GROUP, FieldType.DATA_TABLE_SELECTOR):
        has_content = bool(table)
    else:
        has_content = bool(answer_text and answer_text.strip())

    # Hidden questions still print when they carry an answer from an earlier state
    if not is_visible and not has_content:
        return None

    is_table = field.type in (FieldType.REPEATABLE_GROUP, FieldType.DATA_TABLE_SELECTOR)
    return PrintableQuestion(
        field_code=field.field_code,
        label=field.label,
        help_text=field.help_text,
        is_required=field.is_required,
        type=field.type,
        answer_text=None if is_table else (answer_text or EMPTY_ANSWER),
        rows=table,
    )


def _printable_section(
    section: FormSection,
    answers: Mapping[str, Any],
    rows: Mapping[str, List[Mapping[str, Any]]],
) -> PrintableSection:
    questions = [
        question
        for question in (_printable_question(f, answers, rows) for f in section.ordered_fields())
        if question is not None
    ]
    return PrintableSection(
        code=section.code,
        title=section.title,
        description=section.description,
        questions=questions,
    )


# ── Scoring ──────────────────────────────────────────────────────────


def build_scoring_breakdown(
    answers: Mapping[str, Any],
    field_map: Optional[Mapping[str, str]] = None,
) -> ScoringBreakdown:
    """Criterion scores, 50% weights and weighted totals for impact and value."""
    inputs = extract_scoring_inputs(answers, field_map)
    scores = calculate_all_scores(inputs)
    weight = f"{CRITERION_WEIGHT:.0%}"

    def criterion(label: str, value: float, category: str) -> ScoreRow:
        return ScoreRow(
            label=label,
            score=_fmt(value),
            weight=weight,
            total=f"{clamp_score(value) * CRITERION_WEIGHT:.2f}",
            category=category,
        )

    impact = ScoreBlock(
        key="IMPACT",
        title="IMPACT",
        rows=[
            criterion("Mission Alignment", inputs.mission_alignment_score, "IMPACT"),
            criterion("Unmet Need", inputs.unmet_need_score, "IMPACT"),
        ],
        summary_label="Impact Score",
        summary_value=_fmt(scores.impact_score),
    )
    value = ScoreBlock(
        key="VALUE",
        title="VALUE",
        rows=[
            criterion("IP Strength and Protectability", inputs.ip_strength_score, "VALUE"),
            criterion("Market", scores.market_score, "VALUE"),
        ],
        summary_label="Value Score",
        summary_value=_fmt(scores.value_score),
    )
    market_sub_criteria = [
        ScoreRow(label="Market Size - Revenue (TAM)", score=_fmt(inputs.market_size_score)),
        ScoreRow(
            label="Patient Population or Procedural Volume",
            score=_fmt(inputs.patient_population_score),
        ),
        ScoreRow(label="# of Direct/Indirect Competitors", score=_fmt(inputs.competitors_score)),
    ]

    return ScoringBreakdown(
        blocks=[impact, value],
        market_sub_criteria=market_sub_criteria,
        impact_score=_fmt(scores.impact_score),
        value_score=_fmt(scores.value_score),
        market_score=_fmt(scores.market_score),
        overall_score=_fmt(scores.overall_score),
    )


def build_matrix_point(
    answers: Mapping[str, Any],
    field_map: Optional[Mapping[str, str]] = None,
) -> ImpactValuePoint:
    scores = calculate_all_scores(extract_scoring_inputs(answers, field_map))
    return ImpactValuePoint(
        impact_score=scores.impact_score,
        value_score=scores.value_score,
        recommendation=scores.recommendation.value,
        recommendation_text=scores.recommendation_text,
        x=clamp_score(scores.impact_score) / SCORE_MAX,
        y=clamp_score(scores.value_score) / SCORE_MAX,
    )


def status_label(status: Union[SubmissionStatus, str, None]) -> str:
    key = status.value if isinstance(status, SubmissionStatus) else status
    return _STATUS_LABELS.get(key, "In Progress")


# ── Entry point ──────────────────────────────────────────────────────


def build_printable_form(
    template: FormTemplate,
    answers: Optional[Mapping[str, Any]] = None,
    rows: Optional[Mapping[str, List[Mapping[str, Any]]]] = None,
    derived_scores: Optional[DerivedScores] = None,
    status: Union[SubmissionStatus, str, None] = IN_PROGRESS_STATUS,
    submission_id: Optional[str] = None,
    submitted_by: Optional[str] = None,
    notes: Optional[str] = None,
    exported_at: Optional[datetime] = None,
    scoring_fields: Optional[Mapping[str, str]] = None,
) -> PrintableForm:
    """Build the printable structure for a template and its answers.

    Args:
        template: The questionnaire.
        answers: Answer set keyed by field code.
        rows: Repeat-group row set keyed by field code.
        derived_scores: Stored derived scores, echoed as-is.
        status: Submission status, or ``BLANK``/``IN_PROGRESS``.
        submission_id: Optional identifier printed in the header.
        submitted_by: Optional submitter printed in the header.
        notes: Optional free-text notes.
        exported_at: Export timestamp; now (UTC) when omitted.
        scoring_fields: Scoring input name -> field code overrides.

    Returns:
        PrintableForm with empty sections left out.
    """
    answers = answers or {}
    rows = rows or {}
    exported_at = exported_at or datetime.now(timezone.utc)

    sections = [
        printable
        for printable in (_printable_section(s, answers, rows) for s in template.ordered_sections())
        if printable.questions
    ]
    logger.debug(
        f"Built printable form for '{template.id}': {len(sections)} sections, "
        f"{sum(len(s.questions) for s in sections)} questions"
    )

    return PrintableForm(
        metadata=PrintableMetadata(
            template_name=template.name,
            template_version=template.version,
            template_description=template.description,
            exported_at=exported_at.isoformat(),
            status_label=status_label(status),
            submission_id=submission_id,
            submitted_by=submitted_by,
            notes=notes,
        ),
        sections=sections,
        derived_scores=derived_scores,
        scoring=build_scoring_breakdown(answers, scoring_fields),
        matrix=build_matrix_point(answers, scoring_fields),
    )
