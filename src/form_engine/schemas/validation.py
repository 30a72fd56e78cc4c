"""Schemas for per-field validation rules."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class ValidationRuleType(str, Enum):
    """Fixed set of validation rule types."""

    REQUIRED = "required"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    CUSTOM = "custom"
    EMAIL = "email"
    URL = "url"
    NUMBER = "number"


DEFAULT_MESSAGES = {
    ValidationRuleType.REQUIRED: "This field is required",
    ValidationRuleType.MIN: "Value is below the minimum",
    ValidationRuleType.MAX: "Value is above the maximum",
    ValidationRuleType.PATTERN: "Invalid format",
    ValidationRuleType.CUSTOM: "Invalid value",
    ValidationRuleType.EMAIL: "Invalid email address",
    ValidationRuleType.URL: "Invalid URL",
    ValidationRuleType.NUMBER: "Must be a valid number",
}


class ValidationRule(BaseModel):
    """One check; ``message`` is reported when the check rejects a value."""

    type: ValidationRuleType
    value: Optional[Union[int, float, str]] = Field(
        None, description="Bound for min/max, regex for pattern"
    )
    message: str = Field("", description="Error message shown on failure")


class ValidationConfig(BaseModel):
    """Ordered rule list; the first failing rule wins."""

    rules: List[ValidationRule] = Field(default_factory=list)
