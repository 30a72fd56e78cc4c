"""Schemas for repeatable-group layouts and info-box metadata."""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

MAX_REPEATABLE_COLUMNS = 8
MAX_REPEATABLE_ROWS = 25

DEFAULT_SELECTOR_KEY = "include"
DEFAULT_NOTE_KEY = "benefit"

# Keys added to predefined rows so a row keeps its identity across saves
ROW_ID_KEY = "__rowId"
ROW_LABEL_KEY = "rowLabel"


class RepeatableMode(str, Enum):
    """How the rows of a group come into existence."""

    USER = "user"
    PREDEFINED = "predefined"


ColumnType = Literal["text", "textarea", "number", "checkbox"]


class RepeatableColumn(BaseModel):
    """A column of a repeatable group."""

    key: str = Field(..., min_length=1)
    label: str
    type: ColumnType = "text"
    required: bool = False
    required_when_selected: bool = False

    def blank_value(self):
        return False if self.type == "checkbox" else ""


class RepeatableRowTemplate(BaseModel):
    """A fixed row offered by a predefined group."""

    id: str = Field(..., min_length=1)
    label: str
    description: Optional[str] = None


class RepeatableGroupConfig(BaseModel):
    """Canonical repeatable-group layout.

    ``max_rows`` is always >= ``min_rows`` once normalized.
    """

    columns: List[RepeatableColumn] = Field(..., min_length=1)
    min_rows: int = 0
    max_rows: Optional[int] = None
    mode: RepeatableMode = RepeatableMode.USER
    rows: List[RepeatableRowTemplate] = Field(default_factory=list)
    row_label: Optional[str] = None
    selector_column_key: Optional[str] = None
    require_on_select: Optional[List[str]] = None

    @property
    def is_predefined(self) -> bool:
        return self.mode == RepeatableMode.PREDEFINED

    @property
    def selector_key(self) -> str:
        return self.selector_column_key or DEFAULT_SELECTOR_KEY

    def get_column(self, key: str) -> Optional[RepeatableColumn]:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    @property
    def note_column(self) -> Optional[RepeatableColumn]:
        """First column that is not the selector column."""
        for column in self.columns:
            if column.key != self.selector_key:
                return column
        return None

    def note_keys(self) -> List[str]:
        """Columns that must be filled for an included predefined row."""
        keys = list(self.require_on_select or [])
        for column in self.columns:
            if column.required_when_selected and column.key not in keys:
                keys.append(column.key)
        # Unspecified requirements fall back to the note column
        if self.require_on_select is None and not keys and self.note_column is not None:
            keys.append(self.note_column.key)
        return keys


class InfoBox(BaseModel):
    """Display-only metadata: an info box renders text and collects no answer."""

    is_info_box: bool = False
    style: str = "blue"
