"""Pydantic schemas for templates, rules, scores and submissions."""

from form_engine.schemas.conditional import (
    ConditionalAction,
    ConditionalConfig,
    ConditionalLogic,
    ConditionalOperator,
    ConditionalRule,
)
from form_engine.schemas.fields import (
    FieldConfig,
    FieldType,
    FormSection,
    FormTemplate,
    QuestionOption,
)
from form_engine.schemas.repeatable import (
    InfoBox,
    RepeatableColumn,
    RepeatableGroupConfig,
    RepeatableMode,
    RepeatableRowTemplate,
)
from form_engine.schemas.scores import DerivedScores, Recommendation, ScoringInputs
from form_engine.schemas.submission import DraftSnapshot, SubmissionPayload, SubmissionStatus
from form_engine.schemas.validation import ValidationConfig, ValidationRule, ValidationRuleType

__all__ = [
    "ConditionalAction",
    "ConditionalConfig",
    "ConditionalLogic",
    "ConditionalOperator",
    "ConditionalRule",
    "DerivedScores",
    "DraftSnapshot",
    "FieldConfig",
    "FieldType",
    "FormSection",
    "FormTemplate",
    "InfoBox",
    "QuestionOption",
    "Recommendation",
    "RepeatableColumn",
    "RepeatableGroupConfig",
    "RepeatableMode",
    "RepeatableRowTemplate",
    "ScoringInputs",
    "SubmissionPayload",
    "SubmissionStatus",
    "ValidationConfig",
    "ValidationRule",
    "ValidationRuleType",
]
