"""Schemas exchanged with the persistence collaborator."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from form_engine.schemas.scores import DerivedScores

Answers = Dict[str, Any]
RowSet = Dict[str, List[Dict[str, Any]]]


class SubmissionStatus(str, Enum):
    """Lifecycle status of a stored submission."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    ARCHIVED = "ARCHIVED"


class DraftSnapshot(BaseModel):
    """A previously saved answer set and row set used to seed a session."""

    answers: Answers = Field(default_factory=dict)
    rows: RowSet = Field(default_factory=dict)


class SubmissionPayload(BaseModel):
    """Everything handed to persistence on save or submit."""

    template_id: str = Field(..., min_length=1)
    answers: Answers = Field(default_factory=dict)
    rows: RowSet = Field(default_factory=dict)
    derived_scores: Optional[DerivedScores] = None
    status: SubmissionStatus = SubmissionStatus.DRAFT
