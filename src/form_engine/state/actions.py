"""Typed reducer actions: the closed set of state transitions.

Every mutation of a form session flows through one of these actions.
Frozen dataclasses keep a dispatched action from being altered after the
fact by the code that built it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from form_engine.schemas.fields import FormTemplate
from form_engine.schemas.scores import DerivedScores


class ActionType(str, Enum):
    """Names of the reducer actions, as they appear in logs."""

    SET_TEMPLATE = "set-template"
    SET_ANSWER = "set-answer"
    SET_REPEAT_ROWS = "set-repeat-rows"
    SET_CURRENT_SECTION = "set-current-section"
    SET_LOADING = "set-loading"
    SET_ERROR = "set-error"
    CLEAR_ERRORS = "clear-errors"
    SET_DERIVED_SCORES = "set-derived-scores"
    HYDRATE_INITIAL_DATA = "hydrate-initial-data"
    RESET = "reset"


@dataclass(frozen=True)
class SetTemplate:
    template: FormTemplate
    type: ActionType = ActionType.SET_TEMPLATE


@dataclass(frozen=True)
class SetAnswer:
    field_code: str
    value: Any
    type: ActionType = ActionType.SET_ANSWER


@dataclass(frozen=True)
class SetRepeatRows:
    field_code: str
    rows: List[Dict[str, Any]]
    type: ActionType = ActionType.SET_REPEAT_ROWS


@dataclass(frozen=True)
class SetCurrentSection:
    index: int
    type: ActionType = ActionType.SET_CURRENT_SECTION


@dataclass(frozen=True)
class SetLoading:
    is_loading: bool
    type: ActionType = ActionType.SET_LOADING


@dataclass(frozen=True)
class SetError:
    """Set a field's error message; an empty message removes the entry."""

    field_code: str
    message: Optional[str]
    type: ActionType = ActionType.SET_ERROR


@dataclass(frozen=True)
class ClearErrors:
    type: ActionType = ActionType.CLEAR_ERRORS


@dataclass(frozen=True)
class SetDerivedScores:
    scores: Optional[DerivedScores]
    type: ActionType = ActionType.SET_DERIVED_SCORES


@dataclass(frozen=True)
class HydrateInitialData:
    """Replace answers and rows wholesale with a saved snapshot."""

    answers: Dict[str, Any] = field(default_factory=dict)
    rows: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    fingerprint: Optional[str] = None
    type: ActionType = ActionType.HYDRATE_INITIAL_DATA


@dataclass(frozen=True)
class Reset:
    type: ActionType = ActionType.RESET


FormAction = Union[
    SetTemplate,
    SetAnswer,
    SetRepeatRows,
    SetCurrentSection,
    SetLoading,
    SetError,
    ClearErrors,
    SetDerivedScores,
    HydrateInitialData,
    Reset,
]
