"""Canonical schemas for conditional visibility/requiredness rules."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

# Scalar values a rule may compare against
ConditionalValue = Optional[Union[bool, int, float, str]]


class ConditionalOperator(str, Enum):
    """Fixed operator set for conditional rules."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    NOT_EMPTY = "not_empty"


class ConditionalAction(str, Enum):
    """What a rule does to its owning field when the condition holds."""

    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"
    OPTIONAL = "optional"


class ConditionalLogic(str, Enum):
    """How rule results are combined."""

    AND = "AND"
    OR = "OR"


class ConditionalRule(BaseModel):
    """A single comparison against another field's answer."""

    field: str = Field(..., description="Field code the rule reads")
    operator: ConditionalOperator
    value: ConditionalValue = Field(None, description="Scalar to compare against")
    action: ConditionalAction = ConditionalAction.SHOW


class ConditionalConfig(BaseModel):
    """Ordered rule set plus a combinator."""

    rules: List[ConditionalRule] = Field(default_factory=list)
    logic: ConditionalLogic = ConditionalLogic.AND

    def has_action(self, action: ConditionalAction) -> bool:
        return any(rule.action == action for rule in self.rules)

    def referenced_fields(self) -> List[str]:
        """Field codes read by this configuration, in rule order, deduplicated."""
        seen: List[str] = []
        for rule in self.rules:
            if rule.field not in seen:
                seen.append(rule.field)
        return seen
