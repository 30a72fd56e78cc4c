"""Pydantic schemas for form templates.

A template is an ordered list of sections, each holding ordered field
configurations. Field configurations carry three opaque configuration blobs
(validation metadata, conditional configuration, repeatable-group layout)
exactly as they were authored; the normalizer turns them into typed
structures once per session.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class FieldType(str, Enum):
    """Closed set of field kinds a template may declare."""

    SHORT_TEXT = "SHORT_TEXT"
    LONG_TEXT = "LONG_TEXT"
    INTEGER = "INTEGER"
    SINGLE_SELECT = "SINGLE_SELECT"
    MULTI_SELECT = "MULTI_SELECT"
    CHECKBOX_GROUP = "CHECKBOX_GROUP"
    DATE = "DATE"
    REPEATABLE_GROUP = "REPEATABLE_GROUP"
    DATA_TABLE_SELECTOR = "DATA_TABLE_SELECTOR"
    SCORING_0_3 = "SCORING_0_3"
    SCORING_MATRIX = "SCORING_MATRIX"


# Kinds whose answer lives in the repeat-group row set rather than the answer set
ROW_FIELD_TYPES = frozenset({FieldType.REPEATABLE_GROUP, FieldType.DATA_TABLE_SELECTOR})


class QuestionOption(BaseModel):
    """Selectable option for select/checkbox fields."""

    label: str = Field(..., description="Display label")
    value: str = Field(..., description="Stored value")
    order: int = Field(0, description="Display order within the field")


class FieldConfig(BaseModel):
    """Configuration for a single question."""

    field_code: str = Field(
        ..., min_length=1, description="Stable dotted identifier, e.g. 'F2.1.score'"
    )
    label: str = Field(..., description="Question label shown to reviewers")
    type: FieldType = Field(..., description="Declared field kind")
    is_required: bool = Field(False, description="Base requiredness")
    help_text: Optional[str] = Field(None, description="Optional guidance text")
    placeholder: Optional[str] = Field(None, description="Optional input placeholder")
    order: int = Field(0, description="Display order within the section")
    options: List[QuestionOption] = Field(
        default_factory=list, description="Options for select/checkbox kinds"
    )

    # Opaque blobs, normalized at session load
    validation: Any = Field(None, description="Validation metadata blob")
    conditional: Any = Field(None, description="Conditional configuration blob")
    repeatable_config: Any = Field(None, description="Repeatable-group layout blob")

    def option_label(self, value: Any) -> Optional[str]:
        """Return the display label for a stored option value, if any."""
        if value is None:
            return None
        for option in self.options:
            if option.value == value:
                return option.label
        return None


class FormSection(BaseModel):
    """Ordered group of questions rendered as one page."""

    code: str = Field(..., description="Section code, e.g. 'F2'")
    title: str = Field(..., description="Section title")
    description: Optional[str] = Field(None)
    order: int = Field(0)
    fields: List[FieldConfig] = Field(default_factory=list)

    def ordered_fields(self) -> List[FieldConfig]:
        return sorted(self.fields, key=lambda f: f.order)


class FormTemplate(BaseModel):
    """A complete questionnaire definition."""

    id: str = Field(..., min_length=1, description="Template identifier")
    name: str = Field(..., description="Template name")
    version: str = Field("1.0", description="Template version label")
    description: Optional[str] = Field(None)
    sections: List[FormSection] = Field(default_factory=list)

    @field_validator("sections")
    @classmethod
    def validate_unique_codes(cls, v: List[FormSection]) -> List[FormSection]:
        """Field codes must be unique across the whole template."""
        seen = set()
        for section in v:
            for field in section.fields:
                if field.field_code in seen:
                    raise ValueError(f"Duplicate field code '{field.field_code}'")
                seen.add(field.field_code)
        return v

    def ordered_sections(self) -> List[FormSection]:
        return sorted(self.sections, key=lambda s: s.order)

    def all_fields(self) -> List[FieldConfig]:
        """All fields in section order, then field order."""
        return [f for s in self.ordered_sections() for f in s.ordered_fields()]

    def get_field(self, field_code: str) -> Optional[FieldConfig]:
        for field in self.all_fields():
            if field.field_code == field_code:
                return field
        return None

    @property
    def section_count(self) -> int:
        return len(self.sections)
