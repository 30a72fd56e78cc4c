"""Pure form-engine components: normalizer, rule evaluator, validator."""

from form_engine.engine.conditional import (
    evaluate_conditional,
    evaluate_rule,
    should_require_field,
    should_show_field,
)
from form_engine.engine.field_kinds import FIELD_KINDS, FieldKind, get_field_kind
from form_engine.engine.normalizer import (
    NormalizedField,
    normalize_field,
    parse_conditional_config,
    parse_info_box,
    parse_repeatable_group_config,
    parse_validation_config,
)
from form_engine.engine.validation import (
    validate_field,
    validate_form_submission,
    validate_question,
    validate_rule,
)

__all__ = [
    "FIELD_KINDS",
    "FieldKind",
    "NormalizedField",
    "evaluate_conditional",
    "evaluate_rule",
    "get_field_kind",
    "normalize_field",
    "parse_conditional_config",
    "parse_info_box",
    "parse_repeatable_group_config",
    "parse_validation_config",
    "should_require_field",
    "should_show_field",
    "validate_field",
    "validate_form_submission",
    "validate_question",
    "validate_rule",
]
