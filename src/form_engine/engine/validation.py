"""Validation engine.

Field-level acceptability checks and whole-form validation.

Every field is checked against an effective rule list built in this order:

1. ``required`` when the field is required (base flag or conditionally forced)
2. kind baselines: ``number`` for integer and score kinds, plus a 0-3 range
   for score kinds
3. custom rules from the field's own validation configuration

The first failing rule supplies the error (first-failure-wins). Row-based
kinds get structural post-checks on top (included rows need their note
columns, user-mode rows need their required columns).

Nothing here raises for well-formed configuration; a broken custom regex is
logged and treated as passing.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set
from urllib.parse import urlsplit

from form_engine.engine.coercion import MISSING, is_blank, is_empty, is_number, to_number
from form_engine.engine.field_kinds import is_numeric_kind
from form_engine.engine.normalizer import NormalizedField, normalize_field
from form_engine.schemas.fields import ROW_FIELD_TYPES, FieldConfig, FieldType
from form_engine.schemas.repeatable import (
    ROW_ID_KEY,
    ROW_LABEL_KEY,
    RepeatableGroupConfig,
)
from form_engine.schemas.validation import (
    DEFAULT_MESSAGES,
    ValidationConfig,
    ValidationRule,
    ValidationRuleType,
)

logger = logging.getLogger(__name__)

FieldErrors = Dict[str, str]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")
_NETWORK_SCHEMES = {"http", "https", "ftp", "ws", "wss"}
_ROW_META_KEYS = {ROW_ID_KEY, ROW_LABEL_KEY}


# ── Single rules ─────────────────────────────────────────────────────


def validate_rule(rule: ValidationRule, value: Any, numeric: bool = False) -> Optional[str]:
    """Check one rule; return its message on failure, else None.

    Args:
        rule: The rule to apply.
        value: Candidate answer.
        numeric: Compare ``min``/``max`` numerically (numeric field kinds)
            instead of by string or list length.
    """
    message = rule.message or DEFAULT_MESSAGES[rule.type]

    if rule.type == ValidationRuleType.REQUIRED:
        return message if is_empty(value) else None

    # Optional values only get format checks once they are filled in
    if is_empty(value):
        return None

    if rule.type in (ValidationRuleType.MIN, ValidationRuleType.MAX):
        return _check_bound(rule, value, numeric, message)

    if rule.type == ValidationRuleType.PATTERN:
        if not isinstance(value, str) or not isinstance(rule.value, str):
            return None
        try:
            matched = re.search(rule.value, value) is not None
        except re.error as e:
            logger.warning(f"Ignoring invalid validation pattern {rule.value!r}: {e}")
            return None
        return None if matched else message

    if rule.type == ValidationRuleType.EMAIL:
        if isinstance(value, str) and not _EMAIL_RE.match(value):
            return message
        return None

    if rule.type == ValidationRuleType.URL:
        if isinstance(value, str) and not is_valid_url(value):
            return message
        return None

    if rule.type == ValidationRuleType.NUMBER:
        number = to_number(value)
        return message if math.isnan(number) or math.isinf(number) else None

    # Custom rules need a host-supplied callable; nothing to check here
    return None


def _check_bound(rule: ValidationRule, value: Any, numeric: bool, message: str) -> Optional[str]:
    bound = to_number(rule.value)
    if rule.value is None or math.isnan(bound):
        return None

    if numeric or is_number(value):
        measured = to_number(value)
        if math.isnan(measured):
            return None
    elif isinstance(value, (str, list)):
        measured = len(value)
    else:
        return None

    if rule.type == ValidationRuleType.MIN:
        return message if measured < bound else None
    return message if measured > bound else None


def is_valid_url(text: str) -> bool:
    """Absolute URL check: a scheme, and a host for network schemes."""
    text = text.strip()
    if not text or any(ch.isspace() for ch in text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if parts.scheme.lower() in _NETWORK_SCHEMES:
        return bool(parts.hostname)
    return bool(text[len(parts.scheme) + 1 :])


def validate_field(
    config: Optional[ValidationConfig],
    value: Any,
    numeric: bool = False,
) -> Optional[str]:
    """Run rules in order and return the first error."""
    if config is None:
        return None
    for rule in config.rules:
        error = validate_rule(rule, value, numeric=numeric)
        if error:
            return error
    return None


# ── Per-question ─────────────────────────────────────────────────────


def build_effective_rules(
    field: FieldConfig,
    is_required: bool = False,
    custom: Optional[ValidationConfig] = None,
) -> ValidationConfig:
    """Baseline rules for the field kind followed by its custom rules."""
    rules: List[ValidationRule] = []

    if is_required:
        rules.append(
            ValidationRule(type=ValidationRuleType.REQUIRED, message=f"{field.label} is required")
        )

    if field.type in (FieldType.INTEGER, FieldType.SCORING_0_3):
        rules.append(
            ValidationRule(
                type=ValidationRuleType.NUMBER, message=f"{field.label} must be a valid number"
            )
        )
    if field.type == FieldType.SCORING_0_3:
        range_message = f"{field.label} must be between 0 and 3"
        rules.append(ValidationRule(type=ValidationRuleType.MIN, value=0, message=range_message))
        rules.append(ValidationRule(type=ValidationRuleType.MAX, value=3, message=range_message))

    if custom is not None:
        rules.extend(custom.rules)
    return ValidationConfig(rules=rules)


def validate_question(
    field: FieldConfig,
    value: Any,
    is_required: Optional[bool] = None,
    normalized: Optional[NormalizedField] = None,
) -> Optional[str]:
    """Validate one answer against its field configuration.

    Args:
        field: The question being answered.
        value: The answer; for row kinds, the list of row records.
        is_required: Effective requiredness after conditional rules; the
            field's base flag when None.
        normalized: Pre-parsed configuration, parsed on demand when omitted.

    Returns:
        The first error message, or None when the value is acceptable.
    """
    if normalized is None:
        normalized = normalize_field(field)
    if normalized.is_info_box:
        return None

    effective_required = field.is_required if is_required is None else is_required
    effective = build_effective_rules(field, effective_required, normalized.validation)
    error = validate_field(effective, value, numeric=is_numeric_kind(field.type))
    if error:
        return error

    group = normalized.group_config
    if field.type not in ROW_FIELD_TYPES or group is None:
        return None

    rows = _as_rows(value)
    if field.type == FieldType.DATA_TABLE_SELECTOR or group.is_predefined:
        return validate_selector_rows(field, group, rows, effective_required)
    return validate_repeatable_rows(field, group, rows, effective_required)


def _as_rows(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, Mapping)]


# ── Row structure post-checks ────────────────────────────────────────


def validate_selector_rows(
    field: FieldConfig,
    config: RepeatableGroupConfig,
    rows: List[Mapping[str, Any]],
    is_required: bool,
) -> Optional[str]:
    """Included rows must carry their note columns; a required table needs one included row."""
    selector = config.selector_key
    note_keys = config.note_keys()

    included = [(index, row) for index, row in enumerate(rows) if row.get(selector) is True]
    if is_required and not included:
        return f"{field.label}: select at least one row"

    for index, row in included:
        for key in note_keys:
            if is_blank(row.get(key, MISSING)):
                column = config.get_column(key)
                column_label = column.label if column else key
                return f"{column_label} is required for '{_row_name(row, index)}'"
    return None


def validate_repeatable_rows(
    field: FieldConfig,
    config: RepeatableGroupConfig,
    rows: List[Mapping[str, Any]],
    is_required: bool,
) -> Optional[str]:
    """Row count and required-column checks for user-mode groups."""
    if is_required:
        needed = max(1, config.min_rows)
        if len(rows) < needed:
            noun = "row" if needed == 1 else "rows"
            return f"{field.label} requires at least {needed} {noun}"

    required_columns = [column for column in config.columns if column.required]
    for index, row in enumerate(rows):
        if not (is_required or _row_has_content(row)):
            continue
        for column in required_columns:
            if is_blank(row.get(column.key, MISSING)):
                return f"Row {index + 1}: {column.label} is required"
    return None


def _row_has_content(row: Mapping[str, Any]) -> bool:
    for key, value in row.items():
        if key in _ROW_META_KEYS or value is False:
            continue
        if not is_blank(value):
            return True
    return False


def _row_name(row: Mapping[str, Any], index: int) -> str:
    label = row.get(ROW_LABEL_KEY)
    if isinstance(label, str) and label.strip():
        return label
    return f"row {index + 1}"


# ── Whole form ───────────────────────────────────────────────────────


def validate_form_submission(
    fields: Iterable[FieldConfig],
    answers: Mapping[str, Any],
    required_fields: Optional[Set[str]] = None,
    rows: Optional[Mapping[str, List[Mapping[str, Any]]]] = None,
) -> FieldErrors:
    """Validate every given field and collect ``{field_code: message}``.

    The caller decides which fields are relevant: hidden fields should be
    left out of ``fields`` rather than filtered here.
    """
    required_fields = required_fields or set()
    rows = rows or {}
    errors: FieldErrors = {}

    for field in fields:
        code = field.field_code
        if field.type in ROW_FIELD_TYPES and code in rows:
            value = rows[code]
        else:
            value = answers.get(code)

        error = validate_question(
            field, value, is_required=code in required_fields or field.is_required
        )
        if error:
            errors[code] = error
    return errors


# ── Builders ─────────────────────────────────────────────────────────


def required(message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.REQUIRED,
        message=message or DEFAULT_MESSAGES[ValidationRuleType.REQUIRED],
    )


def min_length(length: int, message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.MIN, value=length, message=message or f"Minimum length is {length}"
    )


def max_length(length: int, message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.MAX, value=length, message=message or f"Maximum length is {length}"
    )


def email(message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.EMAIL, message=message or DEFAULT_MESSAGES[ValidationRuleType.EMAIL]
    )


def url(message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.URL, message=message or DEFAULT_MESSAGES[ValidationRuleType.URL]
    )


def pattern(regex: str, message: Optional[str] = None) -> ValidationRule:
    return ValidationRule(
        type=ValidationRuleType.PATTERN,
        value=regex,
        message=message or DEFAULT_MESSAGES[ValidationRuleType.PATTERN],
    )


def value_range(
    minimum: float, maximum: float, message: Optional[str] = None
) -> List[ValidationRule]:
    """A min rule and a max rule sharing one message."""
    message = message or f"Value must be between {minimum:g} and {maximum:g}"
    return [
        ValidationRule(type=ValidationRuleType.MIN, value=minimum, message=message),
        ValidationRule(type=ValidationRuleType.MAX, value=maximum, message=message),
    ]
