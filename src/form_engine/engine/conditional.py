"""Conditional rule evaluator.

Decides field visibility and effective requiredness from a canonical
``ConditionalConfig`` and the current answer set. Never raises; malformed or
unknown input degrades toward "show everything, use base requiredness".
"""

import logging
import math
from typing import Any, Mapping, Optional

from form_engine.engine.coercion import (
    MISSING,
    is_present,
    stringify,
    strict_equals,
    to_number,
)
from form_engine.schemas.conditional import (
    ConditionalAction,
    ConditionalConfig,
    ConditionalLogic,
    ConditionalOperator,
    ConditionalRule,
    ConditionalValue,
)

logger = logging.getLogger(__name__)


def evaluate_rule(rule: ConditionalRule, answers: Mapping[str, Any]) -> bool:
    """Evaluate one rule against the answer set."""
    answer = answers.get(rule.field, MISSING)
    operator = rule.operator

    if operator == ConditionalOperator.EQUALS:
        return strict_equals(answer, rule.value)

    if operator == ConditionalOperator.NOT_EQUALS:
        return not strict_equals(answer, rule.value)

    if operator == ConditionalOperator.CONTAINS:
        if rule.value is None:
            return False
        if isinstance(answer, list):
            target = stringify(rule.value)
            return any(stringify(item) == target for item in answer)
        if isinstance(answer, str) and isinstance(rule.value, str):
            return rule.value in answer
        return False

    if operator == ConditionalOperator.GREATER_THAN:
        left, right = to_number(answer), to_number(rule.value)
        return not (math.isnan(left) or math.isnan(right)) and left > right

    if operator == ConditionalOperator.LESS_THAN:
        left, right = to_number(answer), to_number(rule.value)
        return not (math.isnan(left) or math.isnan(right)) and left < right

    if operator == ConditionalOperator.EXISTS:
        return is_present(answer)

    if operator == ConditionalOperator.NOT_EXISTS:
        return not is_present(answer)

    if operator == ConditionalOperator.NOT_EMPTY:
        if isinstance(answer, list):
            return len(answer) > 0
        return is_present(answer)

    logger.warning(f"Unknown conditional operator: {operator!r}")
    return False


def evaluate_conditional(config: ConditionalConfig, answers: Mapping[str, Any]) -> bool:
    """Combine every rule with the configured AND/OR logic."""
    results = [evaluate_rule(rule, answers) for rule in config.rules]
    if config.logic == ConditionalLogic.AND:
        return all(results)
    return any(results)


def should_show_field(
    config: Optional[ConditionalConfig],
    answers: Mapping[str, Any],
) -> bool:
    """Whether a field is visible for the current answers.

    Show-only rule sets show on a true condition, hide-only rule sets hide on
    a true condition; mixed sets (or sets with neither action) fall back to
    the raw condition result.
    """
    if config is None or not config.rules:
        return True

    result = evaluate_conditional(config, answers)
    has_show = config.has_action(ConditionalAction.SHOW)
    has_hide = config.has_action(ConditionalAction.HIDE)

    if has_show and not has_hide:
        return result
    if has_hide and not has_show:
        return not result
    return result


def should_require_field(
    config: Optional[ConditionalConfig],
    base_required: bool,
    answers: Mapping[str, Any],
) -> bool:
    """Effective requiredness: ``require`` beats ``optional`` beats the base flag."""
    if config is None or not config.rules:
        return base_required

    result = evaluate_conditional(config, answers)
    if config.has_action(ConditionalAction.REQUIRE) and result:
        return True
    if config.has_action(ConditionalAction.OPTIONAL) and result:
        return False
    return base_required


# ── Builders ─────────────────────────────────────────────────────────


def show_when_equals(field: str, value: ConditionalValue) -> ConditionalRule:
    """Show the owning field when ``field`` equals ``value``."""
    return ConditionalRule(
        field=field, operator=ConditionalOperator.EQUALS, value=value, action=ConditionalAction.SHOW
    )


def hide_when_equals(field: str, value: ConditionalValue) -> ConditionalRule:
    """Hide the owning field when ``field`` equals ``value``."""
    return ConditionalRule(
        field=field, operator=ConditionalOperator.EQUALS, value=value, action=ConditionalAction.HIDE
    )


def require_when_exists(field: str) -> ConditionalRule:
    """Require the owning field once ``field`` has an answer."""
    return ConditionalRule(
        field=field, operator=ConditionalOperator.EXISTS, value=None, action=ConditionalAction.REQUIRE
    )


def show_when_contains(field: str, value: ConditionalValue) -> ConditionalRule:
    """Show the owning field when a multi-select answer includes ``value``."""
    return ConditionalRule(
        field=field, operator=ConditionalOperator.CONTAINS, value=value, action=ConditionalAction.SHOW
    )


def all_of(*rules: ConditionalRule) -> ConditionalConfig:
    return ConditionalConfig(rules=list(rules), logic=ConditionalLogic.AND)


def any_of(*rules: ConditionalRule) -> ConditionalConfig:
    return ConditionalConfig(rules=list(rules), logic=ConditionalLogic.OR)
