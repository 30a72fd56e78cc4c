"""Form session state and its pure reducer."""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from form_engine.schemas.fields import FormTemplate
from form_engine.schemas.scores import DerivedScores
from form_engine.state.actions import (
    ClearErrors,
    FormAction,
    HydrateInitialData,
    Reset,
    SetAnswer,
    SetCurrentSection,
    SetDerivedScores,
    SetError,
    SetLoading,
    SetRepeatRows,
    SetTemplate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormState:
    """Snapshot of one form session.

    ``current_section`` stays within ``[0, section_count - 1]``. ``is_dirty``
    turns on with the first answer/row edit and is only cleared by hydration,
    a new template or a reset.
    """

    template: Optional[FormTemplate] = None
    answers: Dict[str, Any] = field(default_factory=dict)
    rows: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    current_section: int = 0
    is_loading: bool = False
    is_dirty: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    derived_scores: Optional[DerivedScores] = None
    hydrated_fingerprint: Optional[str] = None

    @property
    def section_count(self) -> int:
        return self.template.section_count if self.template else 0


def initial_state() -> FormState:
    return FormState()


def clamp_section(index: int, section_count: int) -> int:
    if section_count <= 0:
        return 0
    return max(0, min(index, section_count - 1))


def _without(errors: Dict[str, str], field_code: str) -> Dict[str, str]:
    return {code: message for code, message in errors.items() if code != field_code}


def form_reducer(state: FormState, action: FormAction) -> FormState:
    """Apply one action and return the next state; ``state`` is left untouched."""
    if isinstance(action, SetTemplate):
        return replace(
            state,
            template=action.template,
            answers={},
            rows={},
            current_section=0,
            errors={},
            derived_scores=None,
            is_dirty=False,
            hydrated_fingerprint=None,
        )

    if isinstance(action, SetAnswer):
        return replace(
            state,
            answers={**state.answers, action.field_code: action.value},
            errors=_without(state.errors, action.field_code),
            is_dirty=True,
        )

    if isinstance(action, SetRepeatRows):
        return replace(
            state,
            rows={**state.rows, action.field_code: [dict(row) for row in action.rows]},
            errors=_without(state.errors, action.field_code),
            is_dirty=True,
        )

    if isinstance(action, SetCurrentSection):
        return replace(state, current_section=clamp_section(action.index, state.section_count))

    if isinstance(action, SetLoading):
        return replace(state, is_loading=action.is_loading)

    if isinstance(action, SetError):
        if not action.message:
            return replace(state, errors=_without(state.errors, action.field_code))
        return replace(state, errors={**state.errors, action.field_code: action.message})

    if isinstance(action, ClearErrors):
        return replace(state, errors={})

    if isinstance(action, SetDerivedScores):
        return replace(state, derived_scores=action.scores)

    if isinstance(action, HydrateInitialData):
        return replace(
            state,
            answers=dict(action.answers),
            rows={code: [dict(row) for row in rows] for code, rows in action.rows.items()},
            errors={},
            is_dirty=False,
            hydrated_fingerprint=action.fingerprint,
        )

    if isinstance(action, Reset):
        return initial_state()

    logger.warning(f"Ignoring unknown form action: {action!r}")
    return state
