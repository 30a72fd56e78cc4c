"""Configuration normalizer.

Turns the opaque configuration blobs stored on each field into canonical
typed structures. Blobs may arrive as already-structured records or as JSON
strings. Nothing here raises: every parse failure degrades to ``None``,
which callers read as "no restriction", "always visible" or "use default
columns".

Conditional configuration exists in two historical shapes:

    legacy:     {"showIf": [{"field": ..., "operator": ..., "value": ...}]}
    canonical:  {"rules": [{"field", "operator", "value", "action"}], "logic": "AND" | "OR"}

Shape detection happens here and only here; the rest of the engine sees
``ConditionalConfig``.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from form_engine.schemas.conditional import (
    ConditionalAction,
    ConditionalConfig,
    ConditionalLogic,
    ConditionalOperator,
    ConditionalRule,
)
from form_engine.schemas.fields import FieldConfig, FieldType
from form_engine.schemas.repeatable import (
    MAX_REPEATABLE_COLUMNS,
    MAX_REPEATABLE_ROWS,
    InfoBox,
    RepeatableColumn,
    RepeatableGroupConfig,
    RepeatableMode,
    RepeatableRowTemplate,
)
from form_engine.schemas.validation import (
    DEFAULT_MESSAGES,
    ValidationConfig,
    ValidationRule,
    ValidationRuleType,
)

logger = logging.getLogger(__name__)

JsonRecord = Dict[str, Any]

_ALLOWED_OPERATORS = {op.value for op in ConditionalOperator}
_ALLOWED_ACTIONS = {action.value for action in ConditionalAction}
_ALLOWED_RULE_TYPES = {rule_type.value for rule_type in ValidationRuleType}
_COLUMN_TYPES = {"text", "textarea", "number", "checkbox"}
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


# ── Generic record parsing ───────────────────────────────────────────


def parse_json_record(value: Any) -> Optional[JsonRecord]:
    """Return ``value`` as a dict, parsing a JSON string once if needed."""
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def derive_column_key(label: str) -> str:
    """Derive a column key from its label.

    Lower-cases, collapses runs of non-alphanumerics to one underscore and
    trims leading/trailing underscores: "How do they benefit?" -> "how_do_they_benefit".
    """
    return _NON_ALNUM_RE.sub("_", label.strip().lower()).strip("_")


# ── Conditional configuration ────────────────────────────────────────


def parse_conditional_config(value: Any) -> Optional[ConditionalConfig]:
    """Parse either conditional shape into a canonical ``ConditionalConfig``.

    Returns None for absent/unparseable blobs and for blobs whose rules are
    all dropped.
    """
    record = parse_json_record(value)
    if record is None:
        if value not in (None, ""):
            logger.warning(f"Ignoring unparseable conditional config: {value!r}")
        return None

    if isinstance(record.get("showIf"), list):
        rules = _collect_rules(record["showIf"], legacy=True)
        logic = ConditionalLogic.OR
    elif isinstance(record.get("rules"), list):
        rules = _collect_rules(record["rules"], legacy=False)
        logic = ConditionalLogic.OR if record.get("logic") == "OR" else ConditionalLogic.AND
    else:
        logger.debug(f"Conditional config has neither 'showIf' nor 'rules': {record!r}")
        return None

    if not rules:
        return None
    return ConditionalConfig(rules=rules, logic=logic)


def _collect_rules(raw_rules: List[Any], legacy: bool) -> List[ConditionalRule]:
    rules = []
    for raw in raw_rules:
        rule = _normalize_rule(raw, legacy)
        if rule is None:
            logger.debug(f"Dropping malformed conditional rule: {raw!r}")
            continue
        rules.append(rule)
    return rules


def _normalize_rule(raw: Any, legacy: bool) -> Optional[ConditionalRule]:
    record = parse_json_record(raw)
    if record is None:
        return None

    # A rule without a value key is incomplete, even for existence operators
    if "value" not in record:
        return None

    field = record.get("field")
    operator = record.get("operator")
    value = record["value"]
    # Legacy rules carry no action; they always show the field
    action = ConditionalAction.SHOW.value if legacy else record.get("action")

    if not isinstance(field, str):
        return None
    if operator not in _ALLOWED_OPERATORS or action not in _ALLOWED_ACTIONS:
        return None
    if not _is_scalar(value):
        return None

    return ConditionalRule(
        field=field,
        operator=ConditionalOperator(operator),
        value=value,
        action=ConditionalAction(action),
    )


# ── Validation metadata ──────────────────────────────────────────────


def parse_validation_metadata(value: Any) -> Optional[JsonRecord]:
    """The raw validation blob as a record (may carry info-box flags)."""
    return parse_json_record(value)


def parse_validation_config(value: Any) -> Optional[ValidationConfig]:
    """Parse custom validation rules; malformed rules are dropped."""
    record = parse_json_record(value)
    if record is None or not isinstance(record.get("rules"), list):
        return None

    rules = []
    for raw in record["rules"]:
        rule = _normalize_validation_rule(raw)
        if rule is None:
            logger.debug(f"Dropping malformed validation rule: {raw!r}")
            continue
        rules.append(rule)

    if not rules:
        return None
    return ValidationConfig(rules=rules)


def _normalize_validation_rule(raw: Any) -> Optional[ValidationRule]:
    record = parse_json_record(raw)
    if record is None or record.get("type") not in _ALLOWED_RULE_TYPES:
        return None

    rule_type = ValidationRuleType(record["type"])
    rule_value = record.get("value")
    if isinstance(rule_value, bool) or not (
        rule_value is None or isinstance(rule_value, (int, float, str))
    ):
        return None

    message = record.get("message")
    if not isinstance(message, str) or not message:
        message = DEFAULT_MESSAGES[rule_type]
    return ValidationRule(type=rule_type, value=rule_value, message=message)


def parse_info_box(value: Any, fallback_style: str = "blue") -> InfoBox:
    """Read the info-box flag and style from validation metadata."""
    metadata = parse_json_record(value)
    if metadata is None:
        return InfoBox(is_info_box=False, style=fallback_style)
    style = metadata.get("infoBoxStyle")
    return InfoBox(
        is_info_box=metadata.get("isInfoBox") is True,
        style=style if isinstance(style, str) else fallback_style,
    )


# ── Repeatable-group layout ──────────────────────────────────────────


def parse_repeatable_group_config(value: Any) -> Optional[RepeatableGroupConfig]:
    """Parse a repeatable-group layout.

    A layout with zero resolvable columns is invalid and yields None.
    Row limits are clamped into [0, 25] (min) and [1, 25] (max), and max is
    raised to min when it would fall below it.
    """
    record = parse_json_record(value)
    if record is None:
        return None

    raw_columns = record.get("columns")
    columns = _parse_columns(raw_columns if isinstance(raw_columns, list) else [])
    if not columns:
        logger.debug(f"Repeatable config has no usable columns: {record!r}")
        return None

    min_rows = _as_int(record.get("minRows"))
    min_rows = 0 if min_rows is None else max(0, min(min_rows, MAX_REPEATABLE_ROWS))

    max_rows = _as_int(record.get("maxRows"))
    if max_rows is not None:
        max_rows = max(1, min(max_rows, MAX_REPEATABLE_ROWS))
        max_rows = max(max_rows, min_rows)

    mode = (
        RepeatableMode.PREDEFINED
        if record.get("mode") == RepeatableMode.PREDEFINED.value
        else RepeatableMode.USER
    )

    raw_rows = record.get("rows")
    rows = _parse_row_templates(raw_rows if isinstance(raw_rows, list) else [])

    row_label = record.get("rowLabel")
    selector = record.get("selectorColumnKey")
    require_on_select = record.get("requireOnSelect")
    if isinstance(require_on_select, list):
        require_on_select = [k for k in require_on_select if isinstance(k, str) and k]
    else:
        require_on_select = None

    return RepeatableGroupConfig(
        columns=columns,
        min_rows=min_rows,
        max_rows=max_rows,
        mode=mode,
        rows=rows,
        row_label=row_label if isinstance(row_label, str) else None,
        selector_column_key=selector if isinstance(selector, str) and selector else None,
        require_on_select=require_on_select,
    )


def _parse_columns(raw_columns: List[Any]) -> List[RepeatableColumn]:
    columns: List[RepeatableColumn] = []
    seen_keys = set()
    for raw in raw_columns:
        if isinstance(raw, str):
            raw = {"label": raw}
        record = parse_json_record(raw)
        if record is None:
            continue

        label = record.get("label") if isinstance(record.get("label"), str) else ""
        key = record.get("key")
        if not isinstance(key, str) or not key.strip():
            key = derive_column_key(label)
        if not key or key in seen_keys:
            continue

        column_type = record.get("type")
        columns.append(
            RepeatableColumn(
                key=key,
                label=label or key,
                type=column_type if column_type in _COLUMN_TYPES else "text",
                required=record.get("required") is True,
                required_when_selected=record.get("requiredWhenSelected") is True,
            )
        )
        seen_keys.add(key)
        if len(columns) >= MAX_REPEATABLE_COLUMNS:
            break
    return columns


def _parse_row_templates(raw_rows: List[Any]) -> List[RepeatableRowTemplate]:
    rows: List[RepeatableRowTemplate] = []
    seen_ids = set()
    for raw in raw_rows:
        record = parse_json_record(raw)
        if record is None:
            continue
        label = record.get("label") if isinstance(record.get("label"), str) else ""
        row_id = record.get("id")
        if not isinstance(row_id, str) or not row_id.strip():
            row_id = derive_column_key(label)
        if not row_id or row_id in seen_ids:
            continue
        description = record.get("description")
        rows.append(
            RepeatableRowTemplate(
                id=row_id,
                label=label or row_id,
                description=description if isinstance(description, str) else None,
            )
        )
        seen_ids.add(row_id)
        if len(rows) >= MAX_REPEATABLE_ROWS:
            break
    return rows


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


# ── Per-field bundle ─────────────────────────────────────────────────


@dataclass(frozen=True)
class NormalizedField:
    """A field configuration with its blobs parsed once."""

    field: FieldConfig
    conditional: Optional[ConditionalConfig]
    validation: Optional[ValidationConfig]
    repeatable: Optional[RepeatableGroupConfig]
    info_box: InfoBox

    @property
    def code(self) -> str:
        return self.field.field_code

    @property
    def is_info_box(self) -> bool:
        return self.info_box.is_info_box

    @property
    def group_config(self) -> Optional[RepeatableGroupConfig]:
        """Parsed row layout, or the kind's default layout for row-based fields."""
        return self.repeatable or default_group_config(self.field.type)


def normalize_field(field: FieldConfig) -> NormalizedField:
    return NormalizedField(
        field=field,
        conditional=parse_conditional_config(field.conditional),
        validation=parse_validation_config(field.validation),
        repeatable=parse_repeatable_group_config(field.repeatable_config),
        info_box=parse_info_box(field.validation),
    )


def default_group_config(field_type: FieldType) -> Optional[RepeatableGroupConfig]:
    """Layout used when a row-based field has no usable configuration."""
    if field_type == FieldType.DATA_TABLE_SELECTOR:
        return RepeatableGroupConfig(
            mode=RepeatableMode.PREDEFINED,
            row_label="Stakeholder",
            columns=[
                RepeatableColumn(key="include", label="Include?", type="checkbox"),
                RepeatableColumn(
                    key="benefit",
                    label="How do they benefit?",
                    type="textarea",
                    required_when_selected=True,
                ),
            ],
            rows=[
                RepeatableRowTemplate(id="patients", label="Patients"),
                RepeatableRowTemplate(id="caregivers", label="Caregivers"),
                RepeatableRowTemplate(id="clinicians", label="Clinicians"),
            ],
            selector_column_key="include",
            require_on_select=["benefit"],
        )
    if field_type == FieldType.REPEATABLE_GROUP:
        return RepeatableGroupConfig(
            columns=[RepeatableColumn(key="value", label="Value", type="text", required=True)]
        )
    return None
